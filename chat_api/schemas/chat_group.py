from datetime import datetime
from typing import List, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field

from chat_api.models.chat_groups import ParticipantRole, ParticipantStatus


class ChatGroupCreate(BaseModel):
    """채팅방 생성 스키마"""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255, description="채팅방 이름")
    participants: List[str] = Field(default_factory=list, description="초대할 사용자 ID 목록")
    avatar: Optional[str] = Field(None, description="채팅방 이미지 URL")
    description: Optional[str] = Field(None, description="채팅방 설명")
    is_group_chat: Optional[bool] = Field(None, alias="isGroupChat", description="그룹 채팅 여부 (기본값: True)")
    project_id: Optional[str] = Field(None, alias="projectId", description="소속 프로젝트 ID")
    organization_id: Optional[str] = Field(None, alias="organizationId", description="소속 조직 ID")


class ChatGroupUpdate(BaseModel):
    """채팅방 수정 스키마 (빈 값은 무시)"""
    name: Optional[str] = Field(None, max_length=255, description="채팅방 이름")
    description: Optional[str] = Field(None, description="채팅방 설명")


class ParticipantResponse(BaseModel):
    """참여자 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    user_id: PydanticObjectId = Field(..., description="참여자 사용자 ID")
    role: ParticipantRole = Field(..., description="역할")
    status: ParticipantStatus = Field(..., description="상태")
    invited_by: Optional[PydanticObjectId] = Field(None, description="초대한 사용자 ID")
    joined_at: Optional[datetime] = Field(None, description="참여일시")


class InvitationLinkInfo(BaseModel):
    """채팅방 응답에 포함되는 초대 링크 정보 (토큰 제외)"""
    model_config = ConfigDict(from_attributes=True)

    expires_at: datetime = Field(..., description="만료 시각")
    creator: PydanticObjectId = Field(..., description="링크 생성자 ID")


class ChatGroupResponse(BaseModel):
    """채팅방 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId = Field(..., description="채팅방 ID")
    name: Optional[str] = Field(None, description="채팅방 이름")
    avatar: Optional[str] = Field(None, description="채팅방 이미지 URL")
    description: Optional[str] = Field(None, description="채팅방 설명")
    is_group_chat: bool = Field(..., description="그룹 채팅 여부")
    project: Optional[PydanticObjectId] = Field(None, description="소속 프로젝트 ID")
    organization: Optional[PydanticObjectId] = Field(None, description="소속 조직 ID")
    created_by: PydanticObjectId = Field(..., description="채팅방 생성자 ID")
    participants: List[ParticipantResponse] = Field(default_factory=list, description="참여자 목록")
    last_message: Optional[PydanticObjectId] = Field(None, description="마지막 메시지 ID")
    invitation_link: Optional[InvitationLinkInfo] = Field(None, description="초대 링크 정보")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")


class ChatGroupDeleteResponse(BaseModel):
    """채팅방 삭제 응답 스키마"""
    message: str = Field(..., description="결과 메시지")
    chat_id: PydanticObjectId = Field(..., description="삭제된 채팅방 ID")


class InvitationLinkResponse(BaseModel):
    """초대 링크 발급 응답 스키마"""
    invitation_link: str = Field(..., description="참여 URL")
    token: str = Field(..., description="초대 토큰")
    expires_at: datetime = Field(..., description="만료 시각")


class JoinChatRequest(BaseModel):
    """초대 링크 참여 요청 스키마"""
    token: str = Field(..., min_length=1, description="초대 토큰")


class ParticipantRoleUpdate(BaseModel):
    """참여자 역할 변경 스키마"""
    role: ParticipantRole = Field(..., description="새 역할: admin, manager, member")
