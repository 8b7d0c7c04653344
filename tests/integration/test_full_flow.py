import pytest
from datetime import timedelta
from beanie import PydanticObjectId
from httpx import AsyncClient
from fastapi import status

from chat_api.models.chat_groups import ChatGroup
from chat_api.models.messages import Message
from chat_api.utils.time_utils import utc_now


class TestFullChatGroupFlow:
    """전체 채팅방 플로우 통합 테스트"""

    @pytest.mark.asyncio
    async def test_complete_chat_group_flow(self, client: AsyncClient, headers_for):
        """
        완전한 채팅방 플로우 테스트:
        1. A(플랫폼 Admin)가 채팅방 생성
        2. A가 초대 링크 발급
        3. B가 링크로 참여
        4. B가 메시지 전송
        5. A가 메시지 조회 및 읽음 처리
        6. A가 채팅방 삭제 → 메시지도 삭제
        """
        user_a = PydanticObjectId()
        user_b = PydanticObjectId()
        headers_a = headers_for(user_a, "Admin")
        headers_b = headers_for(user_b, "Developer")

        # 1. 채팅방 생성
        create_response = await client.post("/chat-group/create", json={"name": "Flow"}, headers=headers_a)
        assert create_response.status_code == status.HTTP_201_CREATED
        chat_id = create_response.json()["id"]
        assert create_response.json()["participants"][0]["role"] == "admin"

        # 2. 초대 링크 발급
        link_response = await client.post(f"/chat-group/{chat_id}/invitation-link", headers=headers_a)
        assert link_response.status_code == status.HTTP_200_OK
        token = link_response.json()["token"]

        # B는 아직 채팅방을 볼 수 없음
        before_join = await client.get(f"/chat-group/chat/{chat_id}", headers=headers_b)
        assert before_join.status_code == status.HTTP_404_NOT_FOUND

        # 3. 링크로 참여
        join_response = await client.post("/chat-group/join", json={"token": token}, headers=headers_b)
        assert join_response.status_code == status.HTTP_200_OK

        # B의 채팅방 목록에 표시
        list_response = await client.get("/chat-group/", headers=headers_b)
        assert [chat["id"] for chat in list_response.json()] == [chat_id]

        # 4. 메시지 전송
        send_response = await client.post(
            "/messages/",
            json={"message": {"chat": chat_id, "content": "Hi A, B here"}},
            headers=headers_b
        )
        assert send_response.status_code == status.HTTP_201_CREATED
        message_id = send_response.json()["id"]
        assert send_response.json()["sender"] == str(user_b)

        # 5. 조회 및 읽음 처리
        messages_response = await client.get(f"/messages/chat/{chat_id}", headers=headers_a)
        assert [m["id"] for m in messages_response.json()["messages"]] == [message_id]

        read_response = await client.post(f"/messages/{message_id}/read", headers=headers_a)
        assert read_response.json()["read_by"] == [str(user_a)]

        # 6. 삭제
        delete_response = await client.delete(f"/chat-group/delete/{chat_id}", headers=headers_a)
        assert delete_response.status_code == status.HTTP_200_OK

        assert await Message.get(PydanticObjectId(message_id)) is None
        after_delete = await client.get(f"/messages/chat/{chat_id}", headers=headers_a)
        assert after_delete.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_non_admin_delete_leaves_chat_intact(self, client: AsyncClient, test_chat, test_messages, member_headers, admin_headers):
        """admin이 아닌 참여자의 삭제 시도는 거부되고 채팅방은 유지"""
        response = await client.delete(f"/chat-group/delete/{test_chat.id}", headers=member_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

        still_there = await client.get(f"/chat-group/chat/{test_chat.id}", headers=admin_headers)
        assert still_there.status_code == status.HTTP_200_OK
        messages = await client.get(f"/messages/chat/{test_chat.id}", headers=admin_headers)
        assert messages.json()["total_count"] == len(test_messages)


class TestInvitationLinkExpiry:
    """초대 링크 만료 경계 테스트"""

    async def _set_link_expiry(self, client: AsyncClient, chat_id, headers, expires_at) -> str:
        response = await client.post(f"/chat-group/{chat_id}/invitation-link", headers=headers)
        chat = await ChatGroup.get(chat_id)
        chat.invitation_link.expires_at = expires_at
        await chat.save()
        return response.json()["token"]

    @pytest.mark.asyncio
    async def test_join_one_second_before_expiry(self, client: AsyncClient, test_chat, admin_headers, outsider_headers):
        """만료 1초 전에는 참여 가능"""
        token = await self._set_link_expiry(
            client, test_chat.id, admin_headers, utc_now() + timedelta(seconds=1)
        )

        response = await client.post("/chat-group/join", json={"token": token}, headers=outsider_headers)

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_join_after_expiry(self, client: AsyncClient, test_chat, admin_headers, outsider_user_id, outsider_headers):
        """만료 후에는 참여 불가"""
        token = await self._set_link_expiry(
            client, test_chat.id, admin_headers, utc_now() - timedelta(seconds=1)
        )

        response = await client.post("/chat-group/join", json={"token": token}, headers=outsider_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Invalid or expired invitation link"
        chat = await ChatGroup.get(test_chat.id)
        assert chat.find_participant(outsider_user_id) is None


class TestMessageLifecycleFlow:
    """메시지 수정/삭제/검색 통합 테스트"""

    @pytest.mark.asyncio
    async def test_edit_delete_and_search(self, client: AsyncClient, test_chat, member_headers, admin_headers):
        """수정 후 조회 시 새 내용, 삭제 후 검색 결과에서 제외"""
        sent = await client.post(
            "/messages/",
            json={"message": {"chat": str(test_chat.id), "content": "Release notes draft"}},
            headers=member_headers
        )
        message_id = sent.json()["id"]

        edited = await client.put(f"/messages/{message_id}", json={"content": "Release notes final"}, headers=member_headers)
        assert edited.status_code == status.HTTP_200_OK

        listed = await client.get(f"/messages/chat/{test_chat.id}", headers=admin_headers)
        message = listed.json()["messages"][0]
        assert message["content"] == "Release notes final"
        assert message["is_edited"] is True

        found = await client.get(f"/messages/chat/{test_chat.id}/search?query=release", headers=admin_headers)
        assert [m["id"] for m in found.json()["messages"]] == [message_id]

        deleted = await client.delete(f"/messages/{message_id}", headers=member_headers)
        assert deleted.status_code == status.HTTP_200_OK

        found_after = await client.get(f"/messages/chat/{test_chat.id}/search?query=release", headers=admin_headers)
        assert found_after.json()["messages"] == []
