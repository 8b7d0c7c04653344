# Chat group schemas
from .chat_group import (
    ChatGroupCreate,
    ChatGroupUpdate,
    ChatGroupResponse,
    ChatGroupDeleteResponse,
    ParticipantResponse,
    ParticipantRoleUpdate,
    InvitationLinkInfo,
    InvitationLinkResponse,
    JoinChatRequest,
)

# Message schemas
from .message import (
    AttachmentData,
    MessagePayload,
    MessageCreate,
    MessageUpdate,
    MessageResponse,
    MessageListResponse,
    MessageSearchResponse,
)

# Invitation schemas
from .invitation import (
    InvitationCreate,
    InvitationResponse,
)

# Caller
from .user import CurrentUser, PlatformRole

__all__ = [
    "ChatGroupCreate",
    "ChatGroupUpdate",
    "ChatGroupResponse",
    "ChatGroupDeleteResponse",
    "ParticipantResponse",
    "ParticipantRoleUpdate",
    "InvitationLinkInfo",
    "InvitationLinkResponse",
    "JoinChatRequest",
    "AttachmentData",
    "MessagePayload",
    "MessageCreate",
    "MessageUpdate",
    "MessageResponse",
    "MessageListResponse",
    "MessageSearchResponse",
    "InvitationCreate",
    "InvitationResponse",
    "CurrentUser",
    "PlatformRole",
]
