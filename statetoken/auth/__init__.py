"""
StateToken authentication module.

Issues and validates short-lived signed tokens bound to this server's identity.
"""

from statetoken.auth.exceptions import (
    StateTokenError,
    KeyGenerationError,
    InvalidTokenError,
    TokenExpiredError,
    InvalidSignatureError,
    IssuerMismatchError,
)
from statetoken.auth.keys import AlgorithmPolicy, KeyContext
from statetoken.auth.protocols import TokenFactory, TokenValidator
from statetoken.auth.token_service import AccessTokenManager, TokenClaims, generate_salt

__all__ = [
    # Keys
    "AlgorithmPolicy",
    "KeyContext",
    # Capabilities
    "TokenFactory",
    "TokenValidator",
    # Token service
    "AccessTokenManager",
    "TokenClaims",
    "generate_salt",
    # Exceptions
    "StateTokenError",
    "KeyGenerationError",
    "InvalidTokenError",
    "TokenExpiredError",
    "InvalidSignatureError",
    "IssuerMismatchError",
]
