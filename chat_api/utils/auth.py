from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from chat_api.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    액세스 토큰 발급

    토큰 발급은 인증 서비스의 역할이며, 여기서는 테스트와 운영 도구에서 동일한 서명 규칙으로
    토큰을 만들기 위해 사용합니다. payload는 ``{"id": ..., "role": ...}`` 형식입니다.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(hours=settings.access_token_expire_hours)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """토큰 검증 및 payload 반환 (서명/만료 오류 시 None)"""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
