from fastapi import APIRouter, Depends, status

from chat_api.api.dependencies import get_current_user
from chat_api.core.validators import Validator
from chat_api.schemas.chat_group import ChatGroupResponse
from chat_api.schemas.invitation import InvitationCreate, InvitationResponse
from chat_api.schemas.user import CurrentUser
from chat_api.services import invitation_service

router = APIRouter(prefix="/invitations", tags=["Invitations"])


@router.post("/chat/{chat_id}", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    chat_id: str,
    invitation_data: InvitationCreate,
    current_user: CurrentUser = Depends(get_current_user)
) -> InvitationResponse:
    """
    채팅방 초대 생성 (admin/manager)

    - **inviteeId**: 초대할 사용자 ID (pending 참여자로 미리 추가됨)
    - **email**: 초대할 이메일 주소
    """
    invitee_id = (
        Validator.validate_object_id(invitation_data.invitee_id, "inviteeId")
        if invitation_data.invitee_id else None
    )

    invitation = await invitation_service.create_invitation(
        chat_id,
        current_user.id,
        invitee_id=invitee_id,
        email=invitation_data.email,
    )
    return InvitationResponse.model_validate(invitation)


@router.post("/{token}/accept", response_model=ChatGroupResponse)
async def accept_invitation(
    token: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """초대 수락 후 참여한 채팅방 반환"""
    chat = await invitation_service.accept_invitation(token, current_user.id)
    return ChatGroupResponse.model_validate(chat)


@router.post("/{token}/reject", response_model=InvitationResponse)
async def reject_invitation(
    token: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> InvitationResponse:
    """초대 거절"""
    invitation = await invitation_service.reject_invitation(token, current_user.id)
    return InvitationResponse.model_validate(invitation)
