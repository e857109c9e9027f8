import logging
import secrets

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request):
    return request.app.state.config


def verify_token(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    config=Depends(get_config),
) -> str:
    """Check the shared-secret bearer token.

    With no API_TOKEN configured any non-empty token is accepted, which is
    only meant for local development.
    """
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if config.api_token and not secrets.compare_digest(token.encode(), config.api_token.encode()):
        logger.warning("Rejected request with invalid bearer token")
        raise HTTPException(status_code=403, detail="Invalid token")

    return token
