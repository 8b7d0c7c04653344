from datetime import datetime
from typing import Any, Dict, List, Optional

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from chat_api.utils.time_utils import utc_now


class Attachment(BaseModel):
    """메시지 첨부 파일 정보"""
    url: str = Field(..., description="첨부 파일 URL")
    name: Optional[str] = Field(None, description="원본 파일명")
    size: Optional[int] = Field(None, ge=0, description="파일 크기 (bytes)")
    content_type: Optional[str] = Field(None, description="MIME 타입")


class Message(Document):
    chat: PydanticObjectId = Field(..., description="Chat group ID this message belongs to")
    sender: PydanticObjectId = Field(..., description="User ID who sent the message")
    content: str = Field(..., description="Message content")
    attachments: List[Attachment] = Field(default_factory=list, description="Attached files")
    is_edited: bool = Field(default=False, description="Whether message was edited")
    deleted: bool = Field(default=False, description="Soft delete marker")
    deleted_at: Optional[datetime] = Field(None, description="When message was deleted")
    deleted_by: Optional[PydanticObjectId] = Field(None, description="User ID who deleted the message")
    read_by: List[PydanticObjectId] = Field(default_factory=list, description="User IDs who read the message")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "messages"
        indexes = [
            IndexModel([("chat", ASCENDING), ("deleted", ASCENDING), ("created_at", DESCENDING)]),  # For chat message history
            IndexModel([("sender", ASCENDING), ("created_at", DESCENDING)]),  # For user message history
        ]

    def __repr__(self):
        return f"<Message(id={self.id}, chat={self.chat}, sender={self.sender}, deleted={self.deleted})>"

    @classmethod
    def visible(cls, chat_id: PydanticObjectId, **conditions: Any) -> Dict[str, Any]:
        """
        삭제되지 않은 메시지 조회 조건

        목록, 개수, 검색 모두 이 필터를 사용합니다.
        """
        return {"chat": chat_id, "deleted": False, **conditions}

    def is_sent_by(self, user_id: PydanticObjectId) -> bool:
        return self.sender == user_id

    def edit_content(self, new_content: Optional[str]):
        """내용 수정 (빈 값이면 기존 내용 유지)"""
        if new_content and new_content.strip():
            self.content = new_content
        self.is_edited = True
        self.updated_at = utc_now()

    def soft_delete(self, deleted_by_user_id: PydanticObjectId):
        """소프트 삭제 (레코드는 보존)"""
        now = utc_now()
        self.deleted = True
        self.deleted_at = now
        self.deleted_by = deleted_by_user_id
        self.updated_at = now

    def mark_read_by(self, user_id: PydanticObjectId) -> bool:
        """읽음 표시 추가. 이미 읽은 경우 False"""
        if user_id in self.read_by:
            return False
        self.read_by.append(user_id)
        return True
