from datetime import datetime
from typing import Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field

from chat_api.models.invitations import InvitationStatus


class InvitationCreate(BaseModel):
    """초대 생성 스키마 (invitee_id 또는 email 중 하나 필수)"""
    model_config = ConfigDict(populate_by_name=True)

    invitee_id: Optional[str] = Field(None, alias="inviteeId", description="초대할 사용자 ID")
    email: Optional[str] = Field(None, max_length=255, description="초대할 이메일")


class InvitationResponse(BaseModel):
    """초대 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId = Field(..., description="초대 ID")
    chat: PydanticObjectId = Field(..., description="채팅방 ID")
    inviter: PydanticObjectId = Field(..., description="초대한 사용자 ID")
    invitee: Optional[PydanticObjectId] = Field(None, description="초대받은 사용자 ID")
    email: Optional[str] = Field(None, description="초대받은 이메일")
    token: str = Field(..., description="초대 토큰")
    expires_at: datetime = Field(..., description="만료 시각")
    status: InvitationStatus = Field(..., description="상태")
    is_link_based: bool = Field(..., description="다회용 링크 여부")
    created_at: datetime = Field(..., description="생성일시")
