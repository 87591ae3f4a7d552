"""Shared API dependencies."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from journal.services.auth import decode_access_token
from journal.services.metrics_engine import MetricsService

bearer_scheme = HTTPBearer()


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """Validate the identity provider's JWT and return the user id."""
    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return user_id


def get_metrics_service(request: Request) -> MetricsService:
    """The service instance built for this app in ``journal.main``."""
    return request.app.state.metrics_service
