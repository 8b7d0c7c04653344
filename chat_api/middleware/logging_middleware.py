"""
API 요청 로깅 미들웨어

모든 API 요청과 응답을 구조화된 형태로 로깅합니다.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chat_api.core.logging import clear_request_context, get_logger, log_api_call, set_request_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """API 요청/응답 로깅 미들웨어"""

    def __init__(self, app, log_requests: bool = True, log_responses: bool = True):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 요청 ID (클라이언트가 보낸 값이 있으면 재사용)
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        start_time = time.time()
        set_request_context(request_id)

        if self.log_requests:
            self._log_request(request, request_id)

        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000
            # 인증 의존성이 request.state에 남긴 사용자 ID
            user_id = getattr(request.state, "user_id", None)

            if self.log_responses:
                self._log_response(request, response, request_id, user_id, duration_ms)

            # API 호출 요약 로깅
            log_api_call(
                logger,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
                user_id=user_id,
                request_id=request_id,
                query_params=dict(request.query_params) if request.query_params else None,
                user_agent=request.headers.get("user-agent"),
                client_ip=self._get_client_ip(request)
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000

            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "event_type": "api_error",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "user_id": getattr(request.state, "user_id", None),
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "client_ip": self._get_client_ip(request)
                },
                exc_info=True
            )

            raise

        finally:
            clear_request_context()

    def _log_request(self, request: Request, request_id: str):
        """요청 정보 로깅"""

        # 민감한 헤더 필터링
        filtered_headers = {}
        sensitive_headers = {"authorization", "cookie", "x-api-key"}

        for name, value in request.headers.items():
            if name.lower() in sensitive_headers:
                filtered_headers[name] = "***REDACTED***"
            else:
                filtered_headers[name] = value

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "event_type": "request_started",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params) if request.query_params else None,
                "headers": filtered_headers,
                "client_ip": self._get_client_ip(request),
                "user_agent": request.headers.get("user-agent")
            }
        )

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        user_id: Optional[str],
        duration_ms: float
    ):
        """응답 정보 로깅"""
        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                "event_type": "request_completed",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "user_id": user_id,
                "client_ip": self._get_client_ip(request)
            }
        )

    def _get_client_ip(self, request: Request) -> str:
        """클라이언트 IP 주소 추출"""
        # X-Forwarded-For 헤더 확인 (프록시/로드밸런서 사용 시)
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # 첫 번째 IP가 실제 클라이언트 IP
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        if request.client is not None:
            return request.client.host

        return "unknown"
