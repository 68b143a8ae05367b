"""Authentication dependencies for the binary order API.

Tokens are issued by the account service; this service only verifies them
and loads the user row. ``require_operator`` additionally limits a route to
the accounts listed in OPERATOR_USER_IDS (the sweep trigger).
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bo_common.database import get_db_session
from src.bo_common.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    OperatorRequiredError,
)
from src.bo_gateway.auth.jwt_handler import decode_token
from src.bo_gateway.user.db_models import UserModel

bearer_scheme = HTTPBearer(auto_error=False)

_UNAUTHORIZED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


def _user_id_from(credentials: HTTPAuthorizationCredentials | None) -> uuid.UUID:
    if credentials is None:
        raise _UNAUTHORIZED
    try:
        return uuid.UUID(decode_token(credentials.credentials).get("sub", ""))
    except (InvalidCredentialsError, ValueError):
        raise _UNAUTHORIZED from None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """401 for a missing/invalid token or unknown user, 403 for a disabled account."""
    user = await db.get(UserModel, _user_id_from(credentials))
    if user is None:
        raise _UNAUTHORIZED
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def require_operator(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    if str(current_user.id) not in settings.operator_user_ids:
        raise OperatorRequiredError()
    return current_user
