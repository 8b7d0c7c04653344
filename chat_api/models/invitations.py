from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, PydanticObjectId
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from chat_api.utils.time_utils import utc_now


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Invitation(Document):
    chat: PydanticObjectId = Field(..., description="초대 대상 채팅방 ID")
    inviter: PydanticObjectId = Field(..., description="초대한 사용자 ID")
    invitee: Optional[PydanticObjectId] = Field(None, description="초대받은 사용자 ID")
    email: Optional[str] = Field(None, description="이메일 초대 대상")
    token: str = Field(..., description="초대 토큰")
    expires_at: datetime = Field(..., description="만료 시각")
    status: InvitationStatus = Field(default=InvitationStatus.PENDING)
    is_link_based: bool = Field(default=False, description="다회용 링크 여부")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "invitations"
        indexes = [
            IndexModel([("token", ASCENDING)], unique=True),
            IndexModel([("chat", ASCENDING), ("status", ASCENDING)]),
            IndexModel([("invitee", ASCENDING), ("status", ASCENDING)]),
        ]

    def __repr__(self):
        return f"<Invitation(id={self.id}, chat={self.chat}, status={self.status})>"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utc_now())

    def resolve(self, status: InvitationStatus):
        self.status = status
        self.updated_at = utc_now()
