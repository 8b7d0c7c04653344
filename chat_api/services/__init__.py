"""
Services layer for data access.

This layer handles:
- Membership checks shared by every chat and message operation
- Database queries and operations
- Data transformations
"""

from . import membership_service
from . import chat_group_service
from . import message_service
from . import invitation_service
from . import chat_listing

__all__ = [
    "membership_service",
    "chat_group_service",
    "message_service",
    "invitation_service",
    "chat_listing",
]
