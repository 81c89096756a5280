"""Narrow capabilities for token issuance and validation."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenFactory(Protocol):
    """Mints signed tokens bound to this server's identity."""

    def issue(self) -> str:
        """Return a new compact signed token."""
        ...


@runtime_checkable
class TokenValidator(Protocol):
    """Decides whether a presented token was minted by this server and is still live."""

    def validate(self, token: str) -> bool:
        """
        Validate a token.

        Args:
            token: Untrusted compact token string

        Returns:
            True if the token is valid, False otherwise. Never raises.
        """
        ...
