"""Auth router - identity of the calling user."""
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.config import settings
from app.database import get_database
from app.models.user import User
from app.services.user_service import UserService
from app.utils.auth import verify_access_token


router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Dependency to get current user ID from JWT token.

    Args:
        credentials: HTTP bearer credentials

    Returns:
        User ID from token

    Raises:
        HTTPException: If token is invalid (401)
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        return verify_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
) -> User:
    """
    Dependency to load the current user's profile.

    Raises:
        HTTPException: If no profile exists for the token's user (404)
    """
    user = await UserService(db).get_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def verify_scheduler_secret(
    x_scheduler_secret: str | None = Header(None),
) -> None:
    """
    Dependency guarding jobs that act on every user's data.

    Only callers holding REMINDER_RUN_SECRET (a cron job, not an end user)
    get through. With no secret configured every request is refused.

    Raises:
        HTTPException: If the secret is missing or wrong (403)
    """
    expected = settings.reminder_run_secret
    if not expected or not x_scheduler_secret or not secrets.compare_digest(
        x_scheduler_secret.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to run scheduled jobs",
        )


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
    """
    Get current authenticated user.

    - Requires authentication
    """
    return user
