"""
Invitation service layer for MongoDB operations.

Direct (single-use) invitations addressed to a user or an email address.
Link-based joining lives in chat_group_service.
"""

from typing import Optional

from beanie import PydanticObjectId

from chat_api.core.config import settings
from chat_api.core.errors import (
    BusinessLogicException,
    ChatAccessDeniedException,
    ResourceNotFoundException,
)
from chat_api.core.logging import get_logger
from chat_api.models.chat_groups import ChatGroup, ParticipantRole, ParticipantStatus
from chat_api.models.invitations import Invitation, InvitationStatus
from chat_api.services.chat_group_service import generate_invitation_token
from chat_api.services.membership_service import CHAT_MANAGERS, require_membership
from chat_api.utils.time_utils import expires_in, utc_now

logger = get_logger(__name__)


def _invitation_not_found():
    return ResourceNotFoundException("Invitation")


async def create_invitation(
    chat_id: str,
    inviter_id: PydanticObjectId,
    invitee_id: Optional[PydanticObjectId] = None,
    email: Optional[str] = None
) -> Invitation:
    """
    초대 생성 (admin/manager)

    invitee_id가 지정되면 해당 사용자를 member/pending 참여자로 미리 추가합니다.
    """
    if invitee_id is None and not email:
        raise BusinessLogicException("Either invitee_id or email is required")

    result = await require_membership(chat_id, inviter_id, CHAT_MANAGERS, action="create_invitation")
    chat = result.chat

    invitation = Invitation(
        chat=chat.id,
        inviter=inviter_id,
        invitee=invitee_id,
        email=email,
        token=generate_invitation_token(),
        expires_at=expires_in(settings.invitation_link_ttl_days),
        status=InvitationStatus.PENDING,
        is_link_based=False,
    )
    await invitation.insert()

    if invitee_id is not None and chat.find_participant(invitee_id) is None:
        chat.add_participant(
            invitee_id,
            role=ParticipantRole.MEMBER,
            status=ParticipantStatus.PENDING,
            invited_by=inviter_id
        )
        chat.touch()
        await chat.save()

    logger.info(f"Invitation {invitation.id} created for chat {chat.id} by {inviter_id}")
    return invitation


async def _find_pending_invitation(token: str, user_id: PydanticObjectId) -> Invitation:
    invitation = await Invitation.find_one(Invitation.token == token)
    if invitation is None:
        raise _invitation_not_found()

    # 다른 사용자에게 보낸 초대는 존재 여부를 노출하지 않음
    if invitation.invitee is not None and invitation.invitee != user_id:
        raise _invitation_not_found()

    if invitation.status != InvitationStatus.PENDING:
        raise BusinessLogicException(
            f"Invitation has already been {invitation.status.value}",
            details={"status": invitation.status.value}
        )

    if invitation.is_expired(utc_now()):
        invitation.resolve(InvitationStatus.EXPIRED)
        await invitation.save()
        raise BusinessLogicException("Invitation has expired")

    return invitation


async def accept_invitation(token: str, user_id: PydanticObjectId) -> ChatGroup:
    """초대 수락 후 채팅방 참여"""
    invitation = await _find_pending_invitation(token, user_id)

    chat = await ChatGroup.get(invitation.chat)
    if chat is None:
        raise ChatAccessDeniedException()

    if chat.find_participant(user_id) is None:
        chat.add_participant(
            user_id,
            role=ParticipantRole.MEMBER,
            status=ParticipantStatus.ACTIVE,
            invited_by=invitation.inviter
        )
    else:
        chat.activate_participant(user_id)
    chat.touch()
    await chat.save()

    invitation.resolve(InvitationStatus.ACCEPTED)
    await invitation.save()

    logger.info(f"Invitation {invitation.id} accepted by {user_id}")
    return chat


async def reject_invitation(token: str, user_id: PydanticObjectId) -> Invitation:
    """초대 거절 (대기 중인 참여 레코드는 제거)"""
    invitation = await _find_pending_invitation(token, user_id)

    chat = await ChatGroup.get(invitation.chat)
    if chat is not None:
        participant = chat.find_participant(user_id)
        if participant is not None and participant.status == ParticipantStatus.PENDING:
            chat.remove_participant(user_id)
            chat.touch()
            await chat.save()

    invitation.resolve(InvitationStatus.REJECTED)
    await invitation.save()

    logger.info(f"Invitation {invitation.id} rejected by {user_id}")
    return invitation
