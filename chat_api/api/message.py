from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from chat_api.api.dependencies import get_current_user
from chat_api.core.config import settings
from chat_api.core.logging import get_logger
from chat_api.core.validators import Validator, validate_message_creation
from chat_api.models.messages import Attachment
from chat_api.schemas.message import (
    MessageCreate,
    MessageListResponse,
    MessageResponse,
    MessageSearchResponse,
    MessageUpdate,
)
from chat_api.schemas.user import CurrentUser
from chat_api.services import message_service

logger = get_logger(__name__)
router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("/", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    current_user: CurrentUser = Depends(get_current_user)
) -> MessageResponse:
    """
    메시지 전송

    - **message.chat**: 채팅방 ID
    - **message.content**: 메시지 내용
    - **message.attachments**: 첨부 파일 목록 (선택사항)

    발신자는 토큰의 사용자로 고정됩니다.
    """
    payload = message_data.message

    # 입력 검증
    chat_id, content = validate_message_creation(payload.chat, payload.content)

    message = await message_service.send_message(
        chat_id=chat_id,
        sender_id=current_user.id,
        content=content,
        attachments=[Attachment(**attachment.model_dump()) for attachment in payload.attachments],
    )
    return MessageResponse.model_validate(message)


@router.get("/chat/{chat_id}", response_model=MessageListResponse)
async def get_messages(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    page: int = Query(default=1, description="페이지 번호 (1부터)"),
    limit: int = Query(default=settings.default_page_size, description="페이지당 메시지 개수")
) -> MessageListResponse:
    """
    채팅방 메시지 조회

    - **page**: 페이지 번호 (기본값: 1, 최신 메시지가 1페이지)
    - **limit**: 조회할 메시지 개수 (기본값: 20, 최대: 100)

    각 페이지 안에서는 오래된 메시지부터 정렬됩니다.
    """
    page, limit = Validator.validate_pagination(page, limit, max_limit=settings.max_page_size)

    messages, total_count, has_more = await message_service.get_chat_messages(
        chat_id, current_user.id, page=page, limit=limit
    )
    return MessageListResponse(
        messages=[MessageResponse.model_validate(message) for message in messages],
        total_count=total_count,
        has_more=has_more,
        page=page,
        limit=limit,
    )


@router.get("/chat/{chat_id}/search", response_model=MessageSearchResponse)
async def search_messages(
    chat_id: str,
    query: Optional[str] = Query(default=None, description="검색어"),
    current_user: CurrentUser = Depends(get_current_user)
) -> MessageSearchResponse:
    """
    채팅방 메시지 검색

    대소문자를 구분하지 않는 부분 일치 검색이며 삭제된 메시지는 제외됩니다.
    최신 메시지부터 최대 50개를 반환합니다.
    """
    query = Validator.validate_search_query(query)

    messages = await message_service.search_messages(chat_id, current_user.id, query)
    return MessageSearchResponse(
        messages=[MessageResponse.model_validate(message) for message in messages],
        total_count=len(messages),
        query=query,
    )


@router.put("/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: str,
    update_data: MessageUpdate,
    current_user: CurrentUser = Depends(get_current_user)
) -> MessageResponse:
    """
    메시지 수정 (작성자 전용)

    내용이 비어 있으면 기존 내용을 유지하고 수정 표시만 남깁니다.
    """
    if update_data.content and update_data.content.strip():
        Validator.validate_message_content(update_data.content)

    message = await message_service.update_message(message_id, current_user.id, update_data.content)
    return MessageResponse.model_validate(message)


@router.delete("/{message_id}", response_model=MessageResponse)
async def delete_message(
    message_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> MessageResponse:
    """메시지 삭제 (작성자 전용, 소프트 삭제)"""
    message = await message_service.delete_message(message_id, current_user.id)
    return MessageResponse.model_validate(message)


@router.post("/{message_id}/read", response_model=MessageResponse)
async def mark_message_as_read(
    message_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> MessageResponse:
    """메시지 읽음 처리 (여러 번 호출해도 한 번만 기록)"""
    message = await message_service.mark_message_as_read(message_id, current_user.id)
    return MessageResponse.model_validate(message)
