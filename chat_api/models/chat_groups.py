from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from chat_api.utils.time_utils import utc_now


class ParticipantRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class ParticipantStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REMOVED = "removed"


class Participant(BaseModel):
    """채팅방 참여자 레코드 (역할 + 상태)"""
    user_id: PydanticObjectId = Field(..., description="참여자 사용자 ID")
    role: ParticipantRole = Field(default=ParticipantRole.MEMBER, description="역할: admin, manager, member")
    status: ParticipantStatus = Field(default=ParticipantStatus.ACTIVE, description="상태: pending, active, removed")
    invited_by: Optional[PydanticObjectId] = Field(None, description="초대한 사용자 ID")
    joined_at: Optional[datetime] = Field(default_factory=utc_now, description="참여일시")

    @property
    def is_active(self) -> bool:
        return self.status == ParticipantStatus.ACTIVE


class InvitationLink(BaseModel):
    """링크 기반 초대 정보 (다회용)"""
    token: str = Field(..., description="초대 토큰")
    expires_at: datetime = Field(..., description="만료 시각")
    creator: PydanticObjectId = Field(..., description="링크 생성자 ID")


class ChatGroup(Document):
    name: Optional[str] = Field(None, description="채팅방 이름")
    avatar: Optional[str] = Field(None, description="채팅방 이미지 URL")
    description: Optional[str] = Field(None, description="채팅방 설명")
    is_group_chat: bool = Field(default=True, description="그룹 채팅 여부 (False면 1:1)")
    project: Optional[PydanticObjectId] = Field(None, description="소속 프로젝트 ID")
    organization: Optional[PydanticObjectId] = Field(None, description="소속 조직 ID")
    created_by: PydanticObjectId = Field(..., description="채팅방 생성자 ID")
    participants: List[Participant] = Field(default_factory=list, description="참여자 목록")
    last_message: Optional[PydanticObjectId] = Field(None, description="마지막 메시지 ID")
    invitation_link: Optional[InvitationLink] = Field(None, description="초대 링크")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "chat_groups"
        indexes = [
            IndexModel([("participants.user_id", ASCENDING), ("updated_at", DESCENDING)]),
            IndexModel([("organization", ASCENDING), ("updated_at", DESCENDING)]),
            IndexModel([("project", ASCENDING), ("updated_at", DESCENDING)]),
            IndexModel([("invitation_link.token", ASCENDING)], sparse=True),
        ]

    def __repr__(self):
        return f"<ChatGroup(id={self.id}, name={self.name}, participants={len(self.participants)})>"

    # -------------------------------------------------------------------------
    # 참여자 조회
    # -------------------------------------------------------------------------

    def find_participant(self, user_id: PydanticObjectId) -> Optional[Participant]:
        """상태와 관계없이 사용자 참여 레코드 조회"""
        for participant in self.participants:
            if participant.user_id == user_id:
                return participant
        return None

    def active_participant(
        self,
        user_id: PydanticObjectId,
        roles: Optional[Iterable[ParticipantRole]] = None
    ) -> Optional[Participant]:
        """활성 참여자이면서 (지정된 경우) 허용된 역할인 레코드만 반환"""
        participant = self.find_participant(user_id)
        if participant is None or not participant.is_active:
            return None
        if roles is not None and participant.role not in list(roles):
            return None
        return participant

    def active_admin_count(self) -> int:
        return sum(
            1 for p in self.participants
            if p.is_active and p.role == ParticipantRole.ADMIN
        )

    # -------------------------------------------------------------------------
    # 참여자 변경
    # -------------------------------------------------------------------------

    def add_participant(
        self,
        user_id: PydanticObjectId,
        role: ParticipantRole = ParticipantRole.MEMBER,
        status: ParticipantStatus = ParticipantStatus.ACTIVE,
        invited_by: Optional[PydanticObjectId] = None
    ) -> Participant:
        """참여자 추가 (같은 사용자 중복 추가 불가)"""
        if self.find_participant(user_id) is not None:
            raise ValueError(f"User {user_id} is already a participant")

        participant = Participant(
            user_id=user_id,
            role=role,
            status=status,
            invited_by=invited_by,
            joined_at=utc_now() if status == ParticipantStatus.ACTIVE else None
        )
        self.participants.append(participant)
        return participant

    def remove_participant(self, user_id: PydanticObjectId) -> bool:
        """참여자 레코드를 목록에서 완전히 제거"""
        remaining = [p for p in self.participants if p.user_id != user_id]
        removed = len(remaining) != len(self.participants)
        self.participants = remaining
        return removed

    def activate_participant(self, user_id: PydanticObjectId) -> Optional[Participant]:
        """pending/removed 참여자를 active로 전환"""
        participant = self.find_participant(user_id)
        if participant is None:
            return None
        if not participant.is_active:
            participant.status = ParticipantStatus.ACTIVE
            participant.joined_at = utc_now()
        return participant

    def touch(self):
        self.updated_at = utc_now()
