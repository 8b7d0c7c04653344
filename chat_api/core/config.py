"""
Chat Group Service Configuration

환경 변수를 통한 설정 관리
"""

from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()  # .env 파일 로드


class Settings(BaseSettings):
    """Chat Group Service 설정"""

    # Application
    app_name: str = "Chat Group Service"
    version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Database - MongoDB
    mongo_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "chat_group_db"
    # 레플리카셋 환경에서만 트랜잭션 사용 가능
    mongo_transactions: bool = False

    # JWT
    secret_key: str = "your-secret-key-here"
    algorithm: str = "HS256"
    access_token_expire_hours: int = 2

    # Invitation links
    frontend_url: str = "http://localhost:3000"
    invitation_link_ttl_days: int = 7

    # Messages
    search_result_limit: int = 50
    default_page_size: int = 20
    max_page_size: int = 100

    # CORS
    cors_origins: List[str] = ["*"]

    # Logging
    log_dir: str = "logs"
    log_to_file: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # 추가 환경변수 무시


settings = Settings()
