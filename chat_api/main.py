"""
Chat Group Service - FastAPI Application

채팅방(그룹) 관리, 참여자/초대 관리, 메시지 전송/조회/검색을 담당하는 마이크로서비스
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from chat_api import api
from chat_api.core.config import settings
from chat_api.core.errors import BaseCustomException
from chat_api.core.logging import get_logger, setup_logging
from chat_api.database import close_databases, init_databases
from chat_api.middleware.error_handler import (
    ErrorHandlerMiddleware,
    create_http_exception_handler,
    custom_exception_handler,
    request_validation_exception_handler,
)
from chat_api.middleware.logging_middleware import LoggingMiddleware

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    # Startup
    logger.info(f"{settings.app_name} starting up...")
    await init_databases()

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down...")
    await close_databases()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    lifespan=lifespan
)

# Exception handlers
app.add_exception_handler(BaseCustomException, custom_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, create_http_exception_handler())

# Middleware (마지막에 추가한 것이 가장 바깥)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (기존 클라이언트 호환을 위해 /api 하위에도 등록)
api.include_routers(app, "api", api.__path__)
api.include_routers(app, "api", api.__path__, prefix="/api", include_in_schema=False)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    return {
        "service": settings.app_name,
        "version": settings.version,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chat_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
