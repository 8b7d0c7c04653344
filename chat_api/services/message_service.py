"""
Message service layer for MongoDB operations.

Handles sending, listing, editing, soft-deleting, read receipts and search for
chat group messages. Every query goes through the membership guard first.
"""

import re
from typing import List, Optional, Tuple

from beanie import PydanticObjectId
from pymongo import DESCENDING

from chat_api.core.config import settings
from chat_api.core.errors import MessageAccessDeniedException
from chat_api.core.logging import get_logger
from chat_api.models.messages import Attachment, Message
from chat_api.services import chat_group_service
from chat_api.services.membership_service import ANY_ROLE, require_membership

logger = get_logger(__name__)

NEWEST_FIRST = [("created_at", DESCENDING)]


async def find_message_by_id(message_id: str) -> Optional[Message]:
    """메시지 ID로 조회 (형식이 잘못된 ID는 None)"""
    if not PydanticObjectId.is_valid(message_id):
        return None
    return await Message.get(PydanticObjectId(message_id))


async def _find_own_message(message_id: str, user_id: PydanticObjectId) -> Message:
    message = await find_message_by_id(message_id)
    if message is None or message.deleted or not message.is_sent_by(user_id):
        raise MessageAccessDeniedException()
    return message


# =============================================================================
# Message CRUD Operations
# =============================================================================

async def send_message(
    chat_id: str,
    sender_id: PydanticObjectId,
    content: str,
    attachments: Optional[List[Attachment]] = None
) -> Message:
    """
    메시지 전송

    발신자는 항상 인증된 호출자입니다. 채팅방의 last_message 갱신은 최선 노력이며
    실패해도 전송은 성공으로 처리됩니다.
    """
    result = await require_membership(chat_id, sender_id, ANY_ROLE, action="send_message")
    chat = result.chat

    message = Message(
        chat=chat.id,
        sender=sender_id,
        content=content,
        attachments=attachments or [],
        read_by=[],
    )
    await message.insert()

    try:
        await chat_group_service.touch_last_message(chat.id, message.id)
    except Exception as update_error:
        logger.warning(f"Failed to update last_message of chat {chat.id}: {update_error}")

    return message


async def get_chat_messages(
    chat_id: str,
    user_id: PydanticObjectId,
    page: int = 1,
    limit: int = 20
) -> Tuple[List[Message], int, bool]:
    """
    채팅방 메시지 목록 조회

    최신순으로 잘라온 뒤 시간순(오래된 것부터)으로 뒤집어 반환합니다.

    Returns:
        (messages, total_count, has_more)
    """
    result = await require_membership(chat_id, user_id, ANY_ROLE, action="list_messages")
    visible = Message.visible(result.chat.id)
    skip = (page - 1) * limit

    messages = await Message.find(visible).sort(NEWEST_FIRST).skip(skip).limit(limit).to_list()
    total_count = await Message.find(visible).count()
    has_more = (skip + len(messages)) < total_count

    # 최신순으로 정렬된 것을 역순으로 변경 (오래된 것부터)
    return list(reversed(messages)), total_count, has_more


async def update_message(message_id: str, user_id: PydanticObjectId, content: Optional[str]) -> Message:
    """메시지 수정 (작성자 전용)"""
    message = await _find_own_message(message_id, user_id)

    message.edit_content(content)
    await message.save()
    return message


async def delete_message(message_id: str, user_id: PydanticObjectId) -> Message:
    """메시지 소프트 삭제 (작성자 전용)"""
    message = await _find_own_message(message_id, user_id)

    message.soft_delete(user_id)
    await message.save()

    logger.info(f"Message {message.id} soft-deleted by {user_id}")
    return message


# =============================================================================
# Read Status
# =============================================================================

async def mark_message_as_read(message_id: str, user_id: PydanticObjectId) -> Message:
    """읽음 표시 (여러 번 호출해도 한 번만 기록)"""
    message = await find_message_by_id(message_id)
    if message is None or message.deleted:
        raise MessageAccessDeniedException("Message not found")

    await require_membership(message.chat, user_id, ANY_ROLE, action="mark_read")

    if message.mark_read_by(user_id):
        await message.save()
    return message


# =============================================================================
# Search Operations
# =============================================================================

async def search_messages(chat_id: str, user_id: PydanticObjectId, query: str) -> List[Message]:
    """채팅방 내 메시지 검색 (대소문자 무시, 부분 일치)"""
    result = await require_membership(chat_id, user_id, ANY_ROLE, action="search_messages")

    query_filter = Message.visible(
        result.chat.id,
        content={"$regex": re.escape(query), "$options": "i"}
    )
    return await Message.find(query_filter).sort(NEWEST_FIRST).limit(settings.search_result_limit).to_list()
