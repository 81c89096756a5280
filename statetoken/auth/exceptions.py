"""
Token exceptions for StateToken.

Validation failures are raised internally and collapsed to a boolean at the
``AccessTokenManager.validate`` boundary.
"""


class StateTokenError(Exception):
    """Base exception for StateToken errors."""

    def __init__(self, error: str, error_description: str = None):
        self.error = error
        self.error_description = error_description
        super().__init__(error_description or error)


class KeyGenerationError(StateTokenError):
    """Raised when the signing keypair cannot be generated."""

    def __init__(self, description: str = "Signing key generation failed"):
        super().__init__("key_generation_failed", description)


class InvalidTokenError(StateTokenError):
    """Raised when token validation fails."""

    def __init__(self, description: str = "Invalid token"):
        super().__init__("invalid_token", description)


class TokenExpiredError(InvalidTokenError):
    """Raised when token has expired."""

    def __init__(self, description: str = "Token has expired"):
        super().__init__(description)


class InvalidSignatureError(InvalidTokenError):
    """Raised when token signature is invalid."""

    def __init__(self, description: str = "Invalid token signature"):
        super().__init__(description)


class IssuerMismatchError(InvalidTokenError):
    """Raised when the token was issued by another server."""

    def __init__(self, issuer, description: str = None):
        self.issuer = issuer
        super().__init__(description or f"Incorrect issuer: {issuer}")
