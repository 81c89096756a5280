"""
HTTP host application for StateToken.

Exposes token issuance and validation over HTTP next to the identity
provider callback redirect.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from pydantic import BaseModel

from statetoken import __version__
from statetoken.auth.keys import KeyContext
from statetoken.auth.token_service import AccessTokenManager
from statetoken.callback import create_callback_router
from statetoken.core.config_manager import StateTokenConfig

logger = logging.getLogger(__name__)


class IssueTokenResponse(BaseModel):
    """Issued token."""
    token: str
    expires_in: int


class ValidateTokenRequest(BaseModel):
    """Token presented for validation."""
    token: str


class ValidateTokenResponse(BaseModel):
    """Validation verdict. Carries no rejection reason."""
    valid: bool


def create_token_manager(config: StateTokenConfig) -> AccessTokenManager:
    """Build the token manager, generating this process's signing key."""
    token_config = config.token
    return AccessTokenManager(
        issuer=token_config.issuer,
        key_context=KeyContext.generate(token_config.key_size),
        ttl_minutes=token_config.ttl_minutes,
        salt_length=token_config.salt_length,
    )


def create_app(config: Optional[StateTokenConfig] = None) -> FastAPI:
    """
    Create the StateToken FastAPI application.

    Args:
        config: Loaded configuration, defaults if None

    Returns:
        Configured FastAPI app with the token manager on ``app.state``
    """
    config = config or StateTokenConfig()

    app = FastAPI(
        title="StateToken",
        description="Signed state token issuance and validation",
        version=__version__,
    )
    app.state.token_manager = create_token_manager(config)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.post("/token", response_model=IssueTokenResponse)
    def issue_token(request: Request) -> IssueTokenResponse:
        manager: AccessTokenManager = request.app.state.token_manager
        return IssueTokenResponse(token=manager.issue(), expires_in=manager.ttl_seconds)

    @app.post("/token/validate", response_model=ValidateTokenResponse)
    def validate_token(body: ValidateTokenRequest, request: Request) -> ValidateTokenResponse:
        manager: AccessTokenManager = request.app.state.token_manager
        return ValidateTokenResponse(valid=manager.validate(body.token))

    app.include_router(
        create_callback_router(root_url=config.callback.root_url, path=config.callback.path)
    )

    logger.info(f"StateToken app created, callback path: {config.callback.path}")
    return app
