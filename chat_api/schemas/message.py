from datetime import datetime
from typing import List, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field


class AttachmentData(BaseModel):
    """첨부 파일 스키마"""
    model_config = ConfigDict(from_attributes=True)

    url: str = Field(..., min_length=1, description="첨부 파일 URL")
    name: Optional[str] = Field(None, description="원본 파일명")
    size: Optional[int] = Field(None, ge=0, description="파일 크기 (bytes)")
    content_type: Optional[str] = Field(None, description="MIME 타입")


class MessagePayload(BaseModel):
    """전송할 메시지 본문"""
    chat: str = Field(..., description="채팅방 ID")
    content: str = Field(..., description="메시지 내용")
    attachments: List[AttachmentData] = Field(default_factory=list, description="첨부 파일 목록")


class MessageCreate(BaseModel):
    """메시지 전송 스키마 (발신자는 토큰에서 결정)"""
    message: MessagePayload


class MessageUpdate(BaseModel):
    """메시지 수정 스키마 (빈 값이면 기존 내용 유지)"""
    content: Optional[str] = Field(None, max_length=5000, description="수정할 메시지 내용")


class MessageResponse(BaseModel):
    """메시지 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId = Field(..., description="메시지 ID")
    chat: PydanticObjectId = Field(..., description="채팅방 ID")
    sender: PydanticObjectId = Field(..., description="발신자 ID")
    content: str = Field(..., description="메시지 내용")
    attachments: List[AttachmentData] = Field(default_factory=list, description="첨부 파일 목록")
    is_edited: bool = Field(..., description="수정 여부")
    deleted: bool = Field(..., description="삭제 여부")
    deleted_at: Optional[datetime] = Field(None, description="삭제일시")
    deleted_by: Optional[PydanticObjectId] = Field(None, description="삭제한 사용자 ID")
    read_by: List[PydanticObjectId] = Field(default_factory=list, description="읽은 사용자 ID 목록")
    created_at: datetime = Field(..., description="생성일시")
    updated_at: datetime = Field(..., description="수정일시")


class MessageListResponse(BaseModel):
    """메시지 목록 응답 스키마 (시간순)"""
    messages: List[MessageResponse] = Field(..., description="메시지 목록")
    total_count: int = Field(..., description="삭제되지 않은 전체 메시지 수")
    has_more: bool = Field(..., description="이전 메시지 존재 여부")
    page: int = Field(..., description="현재 페이지")
    limit: int = Field(..., description="페이지당 항목 수")


class MessageSearchResponse(BaseModel):
    """메시지 검색 응답 스키마 (최신순)"""
    messages: List[MessageResponse] = Field(..., description="검색 결과")
    total_count: int = Field(..., description="검색 결과 수")
    query: str = Field(..., description="검색어")
