"""
Role-routed chat listing.

The chat list a caller sees depends on their platform role. Each role maps to
a listing strategy; roles without a strategy are refused.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from chat_api.core.errors import AuthorizationException, user_not_found_error
from chat_api.core.logging import get_logger, log_security_event
from chat_api.models.chat_groups import ChatGroup
from chat_api.models.users import User
from chat_api.schemas.user import CurrentUser, PlatformRole
from chat_api.services import chat_group_service

logger = get_logger(__name__)


class ChatListingStrategy(ABC):
    """플랫폼 역할별 채팅방 목록 조회 전략"""

    @abstractmethod
    async def list_chats(self, current_user: CurrentUser) -> List[ChatGroup]:
        raise NotImplementedError


class AllChatsStrategy(ChatListingStrategy):
    """Admin: 전체 채팅방"""

    async def list_chats(self, current_user: CurrentUser) -> List[ChatGroup]:
        return await chat_group_service.get_all_chats()


class OrganizationChatsStrategy(ChatListingStrategy):
    """Super Admin: 소속 조직의 채팅방"""

    async def list_chats(self, current_user: CurrentUser) -> List[ChatGroup]:
        user = await User.get(current_user.id)
        if user is None:
            raise user_not_found_error(str(current_user.id))
        if user.organization is None:
            return []
        return await chat_group_service.get_organization_chats(user.organization)


class ParticipantChatsStrategy(ChatListingStrategy):
    """일반 역할: 활성 참여 중인 채팅방"""

    async def list_chats(self, current_user: CurrentUser) -> List[ChatGroup]:
        return await chat_group_service.get_user_chats(current_user.id)


_participant_chats = ParticipantChatsStrategy()

LISTING_STRATEGIES: Dict[str, ChatListingStrategy] = {
    PlatformRole.ADMIN.value: AllChatsStrategy(),
    PlatformRole.SUPER_ADMIN.value: OrganizationChatsStrategy(),
    PlatformRole.PROJECT_MANAGER.value: _participant_chats,
    PlatformRole.TEAM_MEMBER.value: _participant_chats,
    PlatformRole.DEVELOPER.value: _participant_chats,
}


def strategy_for(role: str) -> ChatListingStrategy:
    """역할에 맞는 전략 반환 (없으면 403)"""
    strategy = LISTING_STRATEGIES.get(role)
    if strategy is None:
        raise AuthorizationException("Unauthorized access", details={"role": role})
    return strategy


async def list_chats_for(current_user: CurrentUser) -> List[ChatGroup]:
    """호출자의 플랫폼 역할에 따른 채팅방 목록"""
    try:
        strategy = strategy_for(current_user.role)
    except AuthorizationException:
        log_security_event(
            logger,
            "chat_listing_denied",
            severity="low",
            user_id=str(current_user.id),
            role=current_user.role,
        )
        raise
    return await strategy.list_chats(current_user)
