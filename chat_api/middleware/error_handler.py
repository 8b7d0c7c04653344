from typing import Callable

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
    ServerSelectionTimeoutError,
)
from starlette.middleware.base import BaseHTTPMiddleware

from chat_api.core.config import settings
from chat_api.core.errors import (
    BaseCustomException,
    ConflictException,
    ValidationError,
    create_error_response,
    create_validation_error_response,
)
from chat_api.core.logging import get_logger

logger = get_logger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    통합 에러 처리 미들웨어

    라우터까지 도달한 뒤 처리되지 않은 예외를 표준화된 에러 응답으로 변환합니다.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response

        except BaseCustomException as e:
            # 우리가 정의한 커스텀 예외들
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_dict(),
                headers=e.headers
            )

        except DuplicateKeyError as e:
            # 유니크 인덱스 위반 (초대 토큰 등)
            conflict = ConflictException(
                "Duplicate key detected",
                {"constraint": "unique", "detail": str(e) if settings.debug else None}
            )

            logger.warning(f"MongoDB duplicate key on {request.url.path}: {e}")

            return JSONResponse(
                status_code=conflict.status_code,
                content=conflict.to_dict()
            )

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            # MongoDB 연결 에러
            error_response = create_error_response(
                "mongodb_connection_error",
                "MongoDB connection failed",
                status.HTTP_503_SERVICE_UNAVAILABLE,
                {"detail": str(e) if settings.debug else None}
            )

            logger.error(f"MongoDB connection error: {type(e).__name__}: {e}", exc_info=True)

            return JSONResponse(
                status_code=error_response.status_code,
                content=error_response.model_dump()
            )

        except OperationFailure as e:
            # MongoDB 작업 실패 (권한, 트랜잭션 미지원 등)
            error_response = create_error_response(
                "mongodb_operation_error",
                str(e),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"code": e.code}
            )

            logger.error(f"MongoDB operation error: {e}", exc_info=True)

            return JSONResponse(
                status_code=error_response.status_code,
                content=error_response.model_dump()
            )

        except Exception as e:
            # 예상하지 못한 모든 에러들 (메시지는 그대로 노출)
            error_response = create_error_response(
                "internal_server_error",
                str(e) or "An unexpected error occurred",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"type": type(e).__name__}
            )

            logger.error(f"Unhandled exception: {type(e).__name__}: {e}", exc_info=True)

            return JSONResponse(
                status_code=error_response.status_code,
                content=error_response.model_dump()
            )


async def custom_exception_handler(request: Request, exc: BaseCustomException):
    """커스텀 예외를 표준 형식으로 변환"""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """요청 본문/파라미터 검증 실패 (400)"""
    validation_errors = []

    for error in exc.errors():
        field_name = ".".join(str(loc) for loc in error["loc"])
        value = error.get("input")
        validation_errors.append(
            ValidationError(
                field=field_name,
                message=error["msg"],
                value=value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
            )
        )

    error_response = create_validation_error_response(
        "Request validation failed",
        validation_errors
    )

    return JSONResponse(
        status_code=error_response.status_code,
        content=error_response.model_dump()
    )


def create_http_exception_handler():
    """FastAPI HTTPException 핸들러 생성"""
    async def http_exception_handler(request: Request, exc):
        """HTTPException을 표준 형식으로 변환"""

        # 우리의 커스텀 예외인 경우 그대로 반환
        if isinstance(exc, BaseCustomException):
            return await custom_exception_handler(request, exc)

        # 일반 HTTPException인 경우 표준 형식으로 변환
        error_response = create_error_response(
            "http_error",
            exc.detail if isinstance(exc.detail, str) else "HTTP error occurred",
            exc.status_code,
            {"detail": exc.detail} if not isinstance(exc.detail, str) else None
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(),
            headers=getattr(exc, "headers", None)
        )

    return http_exception_handler
