from enum import Enum
from typing import Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, Field


class PlatformRole(str, Enum):
    """토큰에 담긴 플랫폼 역할"""
    ADMIN = "Admin"
    SUPER_ADMIN = "Super Admin"
    PROJECT_MANAGER = "Project Manager"
    TEAM_MEMBER = "Team Member"
    DEVELOPER = "Developer"


class CurrentUser(BaseModel):
    """토큰에서 추출한 호출자 정보"""
    id: PydanticObjectId = Field(..., description="사용자 ID")
    role: Optional[str] = Field(None, description="플랫폼 역할")

    @property
    def is_admin(self) -> bool:
        return self.role == PlatformRole.ADMIN.value
