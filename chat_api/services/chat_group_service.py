"""
Chat group service layer for MongoDB operations.

Handles chat group creation, metadata edits, participant management,
invitation links and cascading deletion.
"""

import secrets
import time
from typing import List, Optional

from beanie import PydanticObjectId
from beanie.operators import In
from pymongo import DESCENDING

from chat_api.core.config import settings
from chat_api.core.errors import (
    BusinessLogicException,
    ChatAccessDeniedException,
    ResourceNotFoundException,
    invalid_invitation_link_error,
)
from chat_api.core.logging import get_logger, log_database_operation
from chat_api.database.mongodb import get_mongo_client
from chat_api.models.chat_groups import (
    ChatGroup,
    InvitationLink,
    ParticipantRole,
    ParticipantStatus,
)
from chat_api.models.invitations import Invitation
from chat_api.models.messages import Message
from chat_api.services.membership_service import (
    ANY_ROLE,
    CHAT_ADMINS,
    CHAT_MANAGERS,
    require_membership,
)
from chat_api.utils.time_utils import expires_in, utc_now

logger = get_logger(__name__)

NEWEST_ACTIVITY_FIRST = [("updated_at", DESCENDING)]


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def generate_invitation_token() -> str:
    """32자리 hex 초대 토큰"""
    return secrets.token_hex(16)


def build_invitation_url(token: str) -> str:
    """프론트엔드 참여 링크 생성"""
    return f"{settings.frontend_url.rstrip('/')}/join-chat?token={token}"


# =============================================================================
# Chat Group CRUD Operations
# =============================================================================

async def create_chat_group(
    creator_id: PydanticObjectId,
    name: Optional[str] = None,
    participant_ids: Optional[List[PydanticObjectId]] = None,
    avatar: Optional[str] = None,
    description: Optional[str] = None,
    is_group_chat: Optional[bool] = None,
    project_id: Optional[PydanticObjectId] = None,
    organization_id: Optional[PydanticObjectId] = None
) -> ChatGroup:
    """
    채팅방 생성

    생성자는 admin/active 참여자가 되고, 나머지 참여자는 member/pending 상태로
    초대됩니다 (중복 및 생성자 본인은 제외).
    """
    chat = ChatGroup(
        name=name,
        avatar=avatar,
        description=description,
        is_group_chat=True if is_group_chat is None else is_group_chat,
        project=project_id,
        organization=organization_id,
        created_by=creator_id,
    )
    chat.add_participant(creator_id, role=ParticipantRole.ADMIN, status=ParticipantStatus.ACTIVE)

    for user_id in participant_ids or []:
        if chat.find_participant(user_id) is not None:
            continue
        chat.add_participant(
            user_id,
            role=ParticipantRole.MEMBER,
            status=ParticipantStatus.PENDING,
            invited_by=creator_id
        )

    await chat.insert()
    logger.info(f"Chat group created: {chat.id} by {creator_id} ({len(chat.participants)} participants)")
    return chat


async def get_chat_for_member(chat_id: str, user_id: PydanticObjectId) -> ChatGroup:
    """참여 중인 채팅방 조회 (활성 참여자만)"""
    result = await require_membership(chat_id, user_id, ANY_ROLE, action="get_chat")
    return result.chat


async def update_chat_metadata(
    chat_id: str,
    user_id: PydanticObjectId,
    name: Optional[str] = None,
    description: Optional[str] = None
) -> ChatGroup:
    """채팅방 이름/설명 수정 (admin 전용, 빈 값은 무시)"""
    result = await require_membership(chat_id, user_id, CHAT_ADMINS, action="update_chat")
    chat = result.chat

    if _has_text(name):
        chat.name = name
    if _has_text(description):
        chat.description = description
    chat.touch()

    await chat.save()
    return chat


async def delete_chat_group(chat_id: str, user_id: PydanticObjectId) -> ChatGroup:
    """
    채팅방 삭제 (admin 전용)

    채팅방의 모든 메시지와 초대를 함께 삭제합니다. 트랜잭션을 사용할 수 없는 환경에서는
    삭제 도중 실패하면 이미 삭제된 메시지와 초대를 다시 저장합니다.
    """
    result = await require_membership(chat_id, user_id, CHAT_ADMINS, action="delete_chat")
    chat = result.chat

    start = time.time()
    if settings.mongo_transactions:
        deleted_count = await _delete_in_transaction(chat)
    else:
        deleted_count = await _delete_with_compensation(chat)

    log_database_operation(
        logger,
        "cascade_delete",
        "messages",
        duration_ms=round((time.time() - start) * 1000, 2),
        affected_documents=deleted_count,
        chat_id=str(chat.id),
    )
    logger.info(f"Chat group deleted: {chat.id} by {user_id}")
    return chat


async def _cascade_delete(chat: ChatGroup, session=None) -> int:
    """메시지, 초대, 채팅방 순서로 삭제"""
    result = await Message.find(Message.chat == chat.id, session=session).delete(session=session)
    await Invitation.find(Invitation.chat == chat.id, session=session).delete(session=session)
    await chat.delete(session=session)
    return result.deleted_count if result else 0


async def _delete_in_transaction(chat: ChatGroup) -> int:
    client = get_mongo_client()
    async with await client.start_session() as session:
        async with session.start_transaction():
            return await _cascade_delete(chat, session=session)


async def _restore_missing(document_model, snapshot: list) -> int:
    """스냅샷 중 현재 존재하지 않는 문서만 다시 저장"""
    if not snapshot:
        return 0

    remaining = await document_model.find(In(document_model.id, [doc.id for doc in snapshot])).to_list()
    remaining_ids = {doc.id for doc in remaining}
    missing = [doc for doc in snapshot if doc.id not in remaining_ids]
    if missing:
        await document_model.insert_many(missing)
    return len(missing)


async def _delete_with_compensation(chat: ChatGroup) -> int:
    messages = await Message.find(Message.chat == chat.id).to_list()
    invitations = await Invitation.find(Invitation.chat == chat.id).to_list()

    try:
        return await _cascade_delete(chat)
    except Exception:
        restored_messages = await _restore_missing(Message, messages)
        restored_invitations = await _restore_missing(Invitation, invitations)
        logger.error(
            f"Chat group {chat.id} delete failed, restored {restored_messages} messages "
            f"and {restored_invitations} invitations",
            exc_info=True
        )
        raise


# =============================================================================
# Chat Group Listing
# =============================================================================

async def get_all_chats() -> List[ChatGroup]:
    """전체 채팅방 목록 (최근 활동순)"""
    return await ChatGroup.find_all().sort(NEWEST_ACTIVITY_FIRST).to_list()


async def get_organization_chats(organization_id: PydanticObjectId) -> List[ChatGroup]:
    """조직별 채팅방 목록"""
    return await ChatGroup.find(
        ChatGroup.organization == organization_id
    ).sort(NEWEST_ACTIVITY_FIRST).to_list()


async def get_project_chats(project_id: PydanticObjectId) -> List[ChatGroup]:
    """프로젝트별 채팅방 목록"""
    return await ChatGroup.find(
        ChatGroup.project == project_id
    ).sort(NEWEST_ACTIVITY_FIRST).to_list()


async def get_user_chats(user_id: PydanticObjectId) -> List[ChatGroup]:
    """사용자가 활성 참여자인 채팅방 목록"""
    return await ChatGroup.find({
        "participants": {
            "$elemMatch": {"user_id": user_id, "status": ParticipantStatus.ACTIVE.value}
        }
    }).sort(NEWEST_ACTIVITY_FIRST).to_list()


# =============================================================================
# Invitation Links
# =============================================================================

async def generate_invitation_link(chat_id: str, user_id: PydanticObjectId) -> ChatGroup:
    """새 초대 링크 발급 (기존 링크는 대체됨)"""
    result = await require_membership(chat_id, user_id, ANY_ROLE, action="generate_invitation_link")
    chat = result.chat

    chat.invitation_link = InvitationLink(
        token=generate_invitation_token(),
        expires_at=expires_in(settings.invitation_link_ttl_days),
        creator=user_id,
    )
    await chat.save()

    logger.info(f"Invitation link generated for chat {chat.id} by {user_id}")
    return chat


async def join_via_invitation_link(token: str, user_id: PydanticObjectId) -> ChatGroup:
    """초대 링크로 채팅방 참여"""
    chat = await ChatGroup.find_one({"invitation_link.token": token})
    if chat is None or chat.invitation_link.expires_at <= utc_now():
        logger.warning(f"Invalid or expired invitation link used by {user_id}")
        raise invalid_invitation_link_error()

    if chat.find_participant(user_id) is not None:
        raise BusinessLogicException("You are already in this chat")

    chat.add_participant(user_id, role=ParticipantRole.MEMBER, status=ParticipantStatus.ACTIVE)
    chat.touch()
    await chat.save()

    logger.info(f"User {user_id} joined chat {chat.id} via invitation link")
    return chat


# =============================================================================
# Participant Management
# =============================================================================

async def remove_participant(
    chat_id: str,
    user_id: PydanticObjectId,
    participant_id: PydanticObjectId
) -> ChatGroup:
    """참여자 제거 (admin/manager)"""
    result = await require_membership(chat_id, user_id, CHAT_MANAGERS, action="remove_participant")
    chat = result.chat

    participant = chat.find_participant(participant_id)
    if participant is None:
        raise ResourceNotFoundException("Participant")

    removing_last_admin = (
        participant.role == ParticipantRole.ADMIN
        and participant.is_active
        and chat.active_admin_count() <= 1
    )
    if removing_last_admin:
        raise BusinessLogicException(
            "Chat must keep at least one admin",
            details={"participant_id": str(participant_id)}
        )

    chat.remove_participant(participant_id)
    chat.touch()
    await chat.save()

    logger.info(f"Participant {participant_id} removed from chat {chat.id} by {user_id}")
    return chat


async def change_participant_role(
    chat_id: str,
    user_id: PydanticObjectId,
    participant_id: PydanticObjectId,
    role: ParticipantRole
) -> ChatGroup:
    """참여자 역할 변경 (admin 전용, 마지막 admin은 강등 불가)"""
    result = await require_membership(chat_id, user_id, CHAT_ADMINS, action="change_participant_role")
    chat = result.chat

    participant = chat.find_participant(participant_id)
    if participant is None:
        raise ResourceNotFoundException("Participant")

    demoting_admin = (
        participant.role == ParticipantRole.ADMIN
        and role != ParticipantRole.ADMIN
        and participant.is_active
    )
    if demoting_admin and chat.active_admin_count() <= 1:
        raise BusinessLogicException(
            "Chat must keep at least one admin",
            details={"participant_id": str(participant_id)}
        )

    participant.role = role
    chat.touch()
    await chat.save()

    logger.info(f"Participant {participant_id} role changed to {role.value} in chat {chat.id}")
    return chat


async def accept_pending_membership(chat_id: str, user_id: PydanticObjectId) -> ChatGroup:
    """초대 대기(pending) 상태를 활성으로 전환"""
    chat = await ChatGroup.get(PydanticObjectId(chat_id)) if PydanticObjectId.is_valid(chat_id) else None
    participant = chat.find_participant(user_id) if chat else None

    # 대기 중인 참여자가 아니면 존재 여부를 노출하지 않음
    if participant is None or participant.status != ParticipantStatus.PENDING:
        raise ChatAccessDeniedException()

    chat.activate_participant(user_id)
    chat.touch()
    await chat.save()

    logger.info(f"User {user_id} accepted pending membership of chat {chat.id}")
    return chat


async def touch_last_message(chat_id: PydanticObjectId, message_id: PydanticObjectId):
    """마지막 메시지 포인터 갱신 (참여자 목록은 건드리지 않음)"""
    await ChatGroup.find_one(ChatGroup.id == chat_id).update(
        {"$set": {"last_message": message_id, "updated_at": utc_now()}}
    )
