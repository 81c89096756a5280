"""
StateToken: signed, short-lived state tokens bound to a server identity.
"""

__version__ = "0.1.0"

from .auth.token_service import AccessTokenManager

__all__ = ["AccessTokenManager", "__version__"]
