from .chat_groups import ChatGroup, Participant, ParticipantRole, ParticipantStatus, InvitationLink
from .messages import Message, Attachment
from .invitations import Invitation, InvitationStatus
from .users import User

DOCUMENT_MODELS = [
    ChatGroup,
    Message,
    Invitation,
    User,
]

__all__ = [
    "ChatGroup",
    "Participant",
    "ParticipantRole",
    "ParticipantStatus",
    "InvitationLink",
    "Message",
    "Attachment",
    "Invitation",
    "InvitationStatus",
    "User",
    "DOCUMENT_MODELS",
]
