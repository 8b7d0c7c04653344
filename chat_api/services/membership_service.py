"""
Membership guard.

Every chat and message operation is gated by the same predicate: the caller must
hold an ``active`` participant record in the target chat group and, for some
actions, one of a set of roles. The guard never distinguishes "chat does not
exist" from "caller has no access" so that chat existence is not leaked to
non-participants.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from beanie import PydanticObjectId
from bson.errors import InvalidId

from chat_api.core.errors import ChatAccessDeniedException
from chat_api.core.logging import get_logger, log_security_event
from chat_api.models.chat_groups import ChatGroup, Participant, ParticipantRole

logger = get_logger(__name__)

# 액션별 허용 역할
ANY_ROLE: Optional[Tuple[ParticipantRole, ...]] = None
CHAT_MANAGERS = (ParticipantRole.ADMIN, ParticipantRole.MANAGER)
CHAT_ADMINS = (ParticipantRole.ADMIN,)


@dataclass(frozen=True)
class MembershipResult:
    allowed: bool
    participant: Optional[Participant] = None
    chat: Optional[ChatGroup] = None


def _to_object_id(value: Any) -> Optional[PydanticObjectId]:
    if isinstance(value, PydanticObjectId):
        return value
    try:
        return PydanticObjectId(str(value))
    except (InvalidId, TypeError, ValueError):
        return None


async def check_membership(
    chat_id: Any,
    user_id: Any,
    required_roles: Optional[Iterable[ParticipantRole]] = ANY_ROLE
) -> MembershipResult:
    """
    채팅방 참여 여부 확인 (부수 효과 없음)

    Args:
        chat_id: 채팅방 ID (형식이 잘못된 ID는 존재하지 않는 채팅방으로 취급)
        user_id: 호출자 ID
        required_roles: 허용 역할 목록 (None이면 모든 역할 허용)

    Returns:
        MembershipResult: allowed가 True이면 participant와 chat이 함께 반환됩니다.
    """
    chat_object_id = _to_object_id(chat_id)
    user_object_id = _to_object_id(user_id)
    if chat_object_id is None or user_object_id is None:
        return MembershipResult(allowed=False)

    chat = await ChatGroup.get(chat_object_id)
    if chat is None:
        return MembershipResult(allowed=False)

    participant = chat.active_participant(user_object_id, required_roles)
    if participant is None:
        return MembershipResult(allowed=False)

    return MembershipResult(allowed=True, participant=participant, chat=chat)


async def require_membership(
    chat_id: Any,
    user_id: Any,
    required_roles: Optional[Iterable[ParticipantRole]] = ANY_ROLE,
    action: str = "access"
) -> MembershipResult:
    """참여 확인 후 실패하면 ChatAccessDeniedException (404)"""
    result = await check_membership(chat_id, user_id, required_roles)
    if not result.allowed:
        log_security_event(
            logger,
            "chat_access_denied",
            severity="low",
            user_id=str(user_id),
            chat_id=str(chat_id),
            action=action,
            required_roles=[role.value for role in required_roles] if required_roles else None,
        )
        raise ChatAccessDeniedException()
    return result
