"""
Signing key and algorithm policy for StateToken.

A ``KeyContext`` is generated once at startup and shared read-only by every
issuance and validation in the process.
"""

import logging
from dataclasses import dataclass, field
from hashlib import sha256
from typing import Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from statetoken.auth.exceptions import KeyGenerationError

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"
DEFAULT_KEY_SIZE = 2048
MIN_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class AlgorithmPolicy:
    """Allow-list of JWS algorithms accepted during verification."""

    algorithms: Tuple[str, ...] = (ALGORITHM,)

    def as_list(self) -> list:
        """Algorithms in the form ``jwt.decode`` expects."""
        return list(self.algorithms)


_WHITELIST = AlgorithmPolicy()


@dataclass(frozen=True)
class KeyContext:
    """
    RSA signing keypair plus the algorithm whitelist.

    Key material is excluded from ``repr`` so the context can be logged.
    """

    private_key: rsa.RSAPrivateKey = field(repr=False)
    public_key: rsa.RSAPublicKey = field(repr=False)
    key_id: str
    key_size: int

    @classmethod
    def generate(cls, key_size: int = DEFAULT_KEY_SIZE) -> "KeyContext":
        """
        Generate a new RSA keypair.

        Args:
            key_size: RSA modulus size in bits

        Returns:
            KeyContext holding the new keypair

        Raises:
            KeyGenerationError: If the keypair cannot be generated
        """
        if key_size < MIN_KEY_SIZE:
            raise KeyGenerationError(
                f"RSA key size must be at least {MIN_KEY_SIZE} bits, got {key_size}"
            )

        logger.info(f"Generating {key_size}-bit RSA key pair for token signing")
        try:
            private_key = rsa.generate_private_key(
                public_exponent=PUBLIC_EXPONENT,
                key_size=key_size,
            )
        except (ValueError, UnsupportedAlgorithm) as e:
            logger.critical(f"RSA key generation failed: {e}")
            raise KeyGenerationError(f"RSA key generation failed: {e}") from e

        public_key = private_key.public_key()
        return cls(
            private_key=private_key,
            public_key=public_key,
            key_id=_thumbprint(public_key),
            key_size=key_size,
        )

    @staticmethod
    def algorithm_whitelist() -> AlgorithmPolicy:
        """Return the single-entry algorithm allow-list."""
        return _WHITELIST


def _thumbprint(public_key: rsa.RSAPublicKey) -> str:
    """First 16 hex chars of the SHA-256 of the public key PEM."""
    public_pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return sha256(public_pem).hexdigest()[:16]
