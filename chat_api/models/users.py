from typing import Optional

from beanie import Document, PydanticObjectId
from pydantic import Field


class User(Document):
    """
    사용자 (읽기 전용)

    사용자 컬렉션은 인증 서비스가 관리합니다. 이 서비스에서는 Super Admin의 소속 조직을
    확인하기 위해서만 조회합니다.
    """
    username: Optional[str] = Field(None, description="사용자명")
    email: Optional[str] = Field(None, description="이메일")
    role: Optional[str] = Field(None, description="플랫폼 역할")
    organization: Optional[PydanticObjectId] = Field(None, description="소속 조직 ID")
    avatar: Optional[str] = Field(None, description="프로필 이미지 URL")

    class Settings:
        name = "users"

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
