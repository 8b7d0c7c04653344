from typing import List

from fastapi import APIRouter, Depends, status

from chat_api.api.dependencies import get_current_user, require_platform_admin
from chat_api.core.validators import Validator, validate_chat_creation
from chat_api.schemas.chat_group import (
    ChatGroupCreate,
    ChatGroupDeleteResponse,
    ChatGroupResponse,
    ChatGroupUpdate,
    InvitationLinkResponse,
    JoinChatRequest,
    ParticipantRoleUpdate,
)
from chat_api.schemas.user import CurrentUser
from chat_api.services import chat_group_service, chat_listing

router = APIRouter(prefix="/chat-group", tags=["Chat Groups"])


def _to_responses(chats) -> List[ChatGroupResponse]:
    return [ChatGroupResponse.model_validate(chat) for chat in chats]


@router.get("/", response_model=List[ChatGroupResponse])
async def get_chats(
    current_user: CurrentUser = Depends(get_current_user)
) -> List[ChatGroupResponse]:
    """
    채팅방 목록 조회 (플랫폼 역할별)

    - **Admin**: 전체 채팅방
    - **Super Admin**: 소속 조직의 채팅방
    - **Project Manager / Team Member / Developer**: 참여 중인 채팅방
    """
    chats = await chat_listing.list_chats_for(current_user)
    return _to_responses(chats)


@router.post("/create", response_model=ChatGroupResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(
    chat_data: ChatGroupCreate,
    current_user: CurrentUser = Depends(require_platform_admin)
) -> ChatGroupResponse:
    """
    채팅방 생성 (플랫폼 Admin 전용)

    - **name**: 채팅방 이름
    - **participants**: 초대할 사용자 ID 목록 (pending 상태로 추가)
    - **isGroupChat**: 그룹 채팅 여부 (기본값: True)
    """

    # 입력 검증
    name, participant_ids = validate_chat_creation(chat_data.name, chat_data.participants)
    project_id = (
        Validator.validate_object_id(chat_data.project_id, "projectId")
        if chat_data.project_id else None
    )
    organization_id = (
        Validator.validate_object_id(chat_data.organization_id, "organizationId")
        if chat_data.organization_id else None
    )

    chat = await chat_group_service.create_chat_group(
        creator_id=current_user.id,
        name=name,
        participant_ids=participant_ids,
        avatar=chat_data.avatar,
        description=chat_data.description,
        is_group_chat=chat_data.is_group_chat,
        project_id=project_id,
        organization_id=organization_id,
    )
    return ChatGroupResponse.model_validate(chat)


@router.get("/organization/{organization_id}", response_model=List[ChatGroupResponse])
async def get_organization_chats(
    organization_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> List[ChatGroupResponse]:
    """조직별 채팅방 목록 (최근 활동순)"""
    organization_object_id = Validator.validate_object_id(organization_id, "organization_id")
    chats = await chat_group_service.get_organization_chats(organization_object_id)
    return _to_responses(chats)


@router.get("/project/{project_id}", response_model=List[ChatGroupResponse])
async def get_project_chats(
    project_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> List[ChatGroupResponse]:
    """프로젝트별 채팅방 목록 (최근 활동순)"""
    project_object_id = Validator.validate_object_id(project_id, "project_id")
    chats = await chat_group_service.get_project_chats(project_object_id)
    return _to_responses(chats)


@router.get("/chat/{chat_id}", response_model=ChatGroupResponse)
async def get_chat(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """채팅방 상세 조회 (활성 참여자만)"""
    chat = await chat_group_service.get_chat_for_member(chat_id, current_user.id)
    return ChatGroupResponse.model_validate(chat)


@router.put("/update/{chat_id}", response_model=ChatGroupResponse)
async def update_chat(
    chat_id: str,
    chat_data: ChatGroupUpdate,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """
    채팅방 정보 수정 (채팅방 admin 전용)

    빈 문자열이나 공백만 있는 값은 무시됩니다.
    """
    chat = await chat_group_service.update_chat_metadata(
        chat_id,
        current_user.id,
        name=chat_data.name,
        description=chat_data.description,
    )
    return ChatGroupResponse.model_validate(chat)


@router.delete("/delete/{chat_id}", response_model=ChatGroupDeleteResponse)
async def delete_chat(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupDeleteResponse:
    """채팅방 삭제 (채팅방 admin 전용, 메시지도 함께 삭제)"""
    chat = await chat_group_service.delete_chat_group(chat_id, current_user.id)
    return ChatGroupDeleteResponse(message="Chat deleted successfully", chat_id=chat.id)


@router.post("/join", response_model=ChatGroupResponse)
async def join_chat(
    join_data: JoinChatRequest,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """초대 링크 토큰으로 채팅방 참여"""
    chat = await chat_group_service.join_via_invitation_link(join_data.token, current_user.id)
    return ChatGroupResponse.model_validate(chat)


@router.post("/{chat_id}/invitation-link", response_model=InvitationLinkResponse)
async def generate_invitation_link(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> InvitationLinkResponse:
    """초대 링크 발급 (7일간 유효, 기존 링크 대체)"""
    chat = await chat_group_service.generate_invitation_link(chat_id, current_user.id)
    link = chat.invitation_link
    return InvitationLinkResponse(
        invitation_link=chat_group_service.build_invitation_url(link.token),
        token=link.token,
        expires_at=link.expires_at,
    )


@router.post("/{chat_id}/accept", response_model=ChatGroupResponse)
async def accept_membership(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """초대 대기 중인 채팅방 참여 수락"""
    chat = await chat_group_service.accept_pending_membership(chat_id, current_user.id)
    return ChatGroupResponse.model_validate(chat)


@router.delete("/{chat_id}/participants/{user_id}", response_model=ChatGroupResponse)
async def remove_participant(
    chat_id: str,
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """참여자 제거 (admin/manager)"""
    participant_id = Validator.validate_object_id(user_id, "user_id")
    chat = await chat_group_service.remove_participant(chat_id, current_user.id, participant_id)
    return ChatGroupResponse.model_validate(chat)


@router.put("/{chat_id}/participants/{user_id}/role", response_model=ChatGroupResponse)
async def change_participant_role(
    chat_id: str,
    user_id: str,
    role_data: ParticipantRoleUpdate,
    current_user: CurrentUser = Depends(get_current_user)
) -> ChatGroupResponse:
    """참여자 역할 변경 (채팅방 admin 전용)"""
    participant_id = Validator.validate_object_id(user_id, "user_id")
    chat = await chat_group_service.change_participant_role(
        chat_id, current_user.id, participant_id, role_data.role
    )
    return ChatGroupResponse.model_validate(chat)
