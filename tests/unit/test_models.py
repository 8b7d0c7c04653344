import pytest
from datetime import timedelta
from beanie import PydanticObjectId

from chat_api.models.chat_groups import ChatGroup, ParticipantRole, ParticipantStatus
from chat_api.models.invitations import Invitation, InvitationStatus
from chat_api.models.messages import Message
from chat_api.utils.time_utils import utc_now


class TestChatGroupModel:
    """ChatGroup 참여자 헬퍼 테스트"""

    def _chat(self) -> ChatGroup:
        creator = PydanticObjectId()
        chat = ChatGroup(name="Model test", created_by=creator)
        chat.add_participant(creator, role=ParticipantRole.ADMIN)
        return chat

    def test_add_participant_rejects_duplicate(self):
        """같은 사용자 중복 추가 불가"""
        chat = self._chat()

        with pytest.raises(ValueError):
            chat.add_participant(chat.created_by)

    def test_pending_participant_has_no_joined_at(self):
        """pending 참여자는 참여일시 없음"""
        chat = self._chat()
        user_id = PydanticObjectId()

        participant = chat.add_participant(user_id, status=ParticipantStatus.PENDING)

        assert participant.joined_at is None
        assert chat.active_participant(user_id) is None

    def test_activate_participant_sets_joined_at(self):
        """pending → active 전환 시 참여일시 기록"""
        chat = self._chat()
        user_id = PydanticObjectId()
        chat.add_participant(user_id, status=ParticipantStatus.PENDING)

        participant = chat.activate_participant(user_id)

        assert participant.status == ParticipantStatus.ACTIVE
        assert participant.joined_at is not None

    def test_active_participant_role_filter(self):
        """역할 필터 적용"""
        chat = self._chat()

        assert chat.active_participant(chat.created_by, [ParticipantRole.ADMIN]) is not None
        assert chat.active_participant(chat.created_by, [ParticipantRole.MEMBER]) is None

    def test_remove_participant(self):
        """참여 레코드 완전 제거"""
        chat = self._chat()
        user_id = PydanticObjectId()
        chat.add_participant(user_id)

        assert chat.remove_participant(user_id) is True
        assert chat.find_participant(user_id) is None
        assert chat.remove_participant(user_id) is False

    def test_active_admin_count(self):
        """활성 admin 수"""
        chat = self._chat()
        chat.add_participant(PydanticObjectId(), role=ParticipantRole.ADMIN, status=ParticipantStatus.PENDING)

        assert chat.active_admin_count() == 1


class TestMessageModel:
    """Message 헬퍼 테스트"""

    def _message(self) -> Message:
        return Message(chat=PydanticObjectId(), sender=PydanticObjectId(), content="original")

    def test_edit_content_keeps_old_content_when_blank(self):
        """빈 내용이면 기존 내용 유지, 수정 표시만 남김"""
        message = self._message()

        message.edit_content("   ")

        assert message.content == "original"
        assert message.is_edited is True

    def test_soft_delete(self):
        """소프트 삭제 필드 기록"""
        message = self._message()
        deleter = message.sender

        message.soft_delete(deleter)

        assert message.deleted is True
        assert message.deleted_by == deleter
        assert message.deleted_at is not None

    def test_mark_read_by_is_idempotent(self):
        """같은 사용자는 한 번만 기록"""
        message = self._message()
        reader = PydanticObjectId()

        assert message.mark_read_by(reader) is True
        assert message.mark_read_by(reader) is False
        assert message.read_by == [reader]

    def test_visible_filter(self):
        """삭제되지 않은 메시지 조회 조건"""
        chat_id = PydanticObjectId()

        assert Message.visible(chat_id) == {"chat": chat_id, "deleted": False}
        assert Message.visible(chat_id, sender=chat_id)["sender"] == chat_id


class TestInvitationModel:
    """Invitation 헬퍼 테스트"""

    def test_is_expired(self):
        """만료 시각이 지나면 만료"""
        now = utc_now()
        invitation = Invitation(
            chat=PydanticObjectId(),
            inviter=PydanticObjectId(),
            token="a" * 32,
            expires_at=now + timedelta(seconds=1),
        )

        assert invitation.is_expired(now) is False
        assert invitation.is_expired(now + timedelta(seconds=1)) is True

    def test_resolve(self):
        """상태 변경"""
        invitation = Invitation(
            chat=PydanticObjectId(),
            inviter=PydanticObjectId(),
            token="b" * 32,
            expires_at=utc_now(),
        )

        invitation.resolve(InvitationStatus.ACCEPTED)

        assert invitation.status == InvitationStatus.ACCEPTED
