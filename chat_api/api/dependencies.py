"""
API Dependencies

FastAPI dependency functions for authentication and authorization
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chat_api.core.errors import (
    ValidationException,
    admins_only_error,
    invalid_token_error,
    missing_token_error,
)
from chat_api.core.logging import get_logger, log_authentication_event, set_user_context
from chat_api.core.validators import Validator
from chat_api.schemas.user import CurrentUser
from chat_api.utils.auth import decode_access_token

logger = get_logger(__name__)

# Bearer 토큰 (누락 시 직접 401 처리)
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> CurrentUser:
    """
    현재 인증된 사용자를 조회합니다.

    Args:
        credentials: Authorization 헤더의 Bearer 토큰

    Returns:
        CurrentUser: 토큰의 ``id``, ``role``

    Raises:
        AuthenticationException: 토큰이 없거나 (Unauthorized) 유효하지 않은 경우 (Invalid token)
    """
    if credentials is None or not credentials.credentials:
        log_authentication_event(logger, "token_missing", success=False)
        raise missing_token_error()

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("id"):
        log_authentication_event(logger, "token_invalid", success=False)
        raise invalid_token_error()

    try:
        user_id = Validator.validate_object_id(payload["id"], "id")
    except ValidationException:
        log_authentication_event(logger, "token_invalid_subject", success=False)
        raise invalid_token_error()

    set_user_context(str(user_id))
    request.state.user_id = str(user_id)
    return CurrentUser(id=user_id, role=payload.get("role"))


async def require_platform_admin(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """플랫폼 Admin 역할 확인"""
    if not current_user.is_admin:
        logger.warning(f"Admin-only access denied for user {current_user.id} (role={current_user.role})")
        raise admins_only_error()
    return current_user
