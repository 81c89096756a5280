"""
Signed state token issuance and validation.

Tokens are RS256-signed JWTs carrying the server identity as issuer, an
expiry a few minutes out and a random salt. Validation is fail-closed:
every rejection collapses to ``False`` and the reason only reaches the logs.
"""

import logging
import math
import secrets
import string
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from statetoken.auth.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
    InvalidSignatureError,
    IssuerMismatchError,
)
from statetoken.auth.keys import ALGORITHM, KeyContext

logger = logging.getLogger(__name__)

SALT_ALPHABET = string.ascii_letters + string.digits


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_salt(length: int) -> str:
    """Random string of ``length`` ASCII letters and digits."""
    return "".join(secrets.choice(SALT_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by a state token."""

    iss: str  # Issuer
    iat: int  # Issued at
    exp: int  # Expiration time
    salt: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AccessTokenManager:
    """
    Issues and validates state tokens for one server.

    Satisfies both ``TokenFactory`` and ``TokenValidator``. Instances hold no
    mutable state after construction and can be shared across threads.
    """

    DEFAULT_TTL_MINUTES = 5.0
    DEFAULT_SALT_LENGTH = 64
    SALT_CLAIM = "salt"

    def __init__(
        self,
        issuer: str,
        key_context: Optional[KeyContext] = None,
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
        salt_length: int = DEFAULT_SALT_LENGTH,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the token manager.

        Args:
            issuer: Stable identity of this server, compared verbatim on validation
            key_context: Signing keypair, generated if None
            ttl_minutes: Token lifetime in minutes
            salt_length: Length of the random salt claim
            clock: Returns the current UTC time, overridable for tests

        Raises:
            ValueError: If issuer is empty or the lifetime is not finite or under one second
            KeyGenerationError: If a keypair has to be generated and that fails
        """
        if not issuer:
            raise ValueError("issuer must be a non-empty string")
        if not math.isfinite(ttl_minutes) or ttl_minutes * 60 < 1:
            raise ValueError(f"ttl_minutes must be finite and at least one second, got {ttl_minutes}")
        if salt_length <= 0:
            raise ValueError(f"salt_length must be positive, got {salt_length}")

        self.issuer = issuer
        self.ttl_minutes = float(ttl_minutes)
        self.salt_length = salt_length
        self._keys = key_context or KeyContext.generate()
        self._policy = self._keys.algorithm_whitelist()
        self._clock = clock or _utcnow

        logger.info(
            f"AccessTokenManager initialized with issuer: {issuer}, "
            f"ttl: {self.ttl_minutes} min, key_id: {self._keys.key_id}"
        )

    @property
    def ttl_seconds(self) -> int:
        return int(self.ttl_minutes * 60)

    @property
    def key_id(self) -> str:
        return self._keys.key_id

    def issue(self) -> str:
        """
        Issue a new signed token.

        Returns:
            Compact JWS serialization (header.payload.signature)
        """
        claims = self._create_claims()

        token = jwt.encode(
            claims.to_dict(),
            self._keys.private_key,
            algorithm=ALGORITHM,
            headers={"kid": self._keys.key_id},
        )

        logger.debug(f"Issued token for iss={claims.iss}, exp={claims.exp}")
        return token

    def validate(self, token: str) -> bool:
        """
        Validate a presented token.

        Args:
            token: Untrusted compact token string

        Returns:
            True only if the signature, algorithm, expiration and issuer all check out
        """
        try:
            self._verify(token)
        except TokenExpiredError as e:
            logger.info(f"Token has expired: {e}", extra={"token_event": "expired"})
            return False
        except IssuerMismatchError as e:
            logger.warning(f"Incorrect issuer: {e.issuer!r}", extra={"token_event": "issuer_mismatch"})
            return False
        except InvalidTokenError as e:
            logger.warning(
                f"Exception occurred during token processing: {e}",
                extra={"token_event": "rejected"},
            )
            return False
        return True

    def _create_claims(self) -> TokenClaims:
        issued_at = int(self._clock().timestamp())
        return TokenClaims(
            iss=self.issuer,
            iat=issued_at,
            exp=issued_at + self.ttl_seconds,
            salt=generate_salt(self.salt_length),
        )

    def _verify(self, token: str) -> Dict[str, Any]:
        """
        Run the validation pipeline.

        Raises:
            InvalidTokenError: On any failure, with a subclass naming the reason
        """
        if not isinstance(token, str) or not token:
            raise InvalidTokenError("Token is empty")

        payload = self._decode_token(token)
        self._validate_expiration(payload)
        self._validate_issuer(payload)
        return payload

    def _decode_token(self, token: str) -> Dict[str, Any]:
        """
        Parse the token and verify its signature under the algorithm whitelist.

        Raises:
            InvalidTokenError: If the token is malformed, uses another algorithm
                or lacks an exp claim
            InvalidSignatureError: If signature is invalid
        """
        try:
            return jwt.decode(
                token,
                self._keys.public_key,
                algorithms=self._policy.as_list(),
                options={
                    "require": ["exp"],
                    "verify_exp": False,  # Checked against self._clock
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_iss": False,  # Checked separately to log the offender
                    "verify_aud": False,
                },
            )

        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError(f"Token signature verification failed: {e}") from e

        except jwt.InvalidAlgorithmError as e:
            raise InvalidTokenError(f"Token algorithm not allowed: {e}") from e

        except jwt.MissingRequiredClaimError as e:
            raise InvalidTokenError(f"Token is missing a required claim: {e}") from e

        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Token decode failed: {e}") from e

        except Exception as e:
            raise InvalidTokenError(f"Token validation failed: {e}") from e

    def _validate_expiration(self, payload: Dict[str, Any]) -> None:
        """
        Raises:
            InvalidTokenError: If exp is not a finite number
            TokenExpiredError: If token has expired
        """
        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidTokenError(f"Expiration claim must be numeric, got {exp!r}")
        if isinstance(exp, float) and not math.isfinite(exp):
            raise InvalidTokenError(f"Expiration claim must be a finite number, got {exp!r}")

        now = self._clock()
        if now.timestamp() >= exp:
            raise TokenExpiredError(f"Token expired at {exp}. Current time: {now.isoformat()}")

    def _validate_issuer(self, payload: Dict[str, Any]) -> None:
        issuer = payload.get("iss")
        if issuer != self.issuer:
            raise IssuerMismatchError(issuer)
