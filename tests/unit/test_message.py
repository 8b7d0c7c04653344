import pytest
from unittest.mock import AsyncMock, patch
from beanie import PydanticObjectId
from httpx import AsyncClient
from fastapi import status

from chat_api.models.chat_groups import ChatGroup
from chat_api.models.messages import Message
from chat_api.services import message_service


class TestSendMessageAPI:
    """메시지 전송 API 테스트"""

    @pytest.mark.asyncio
    async def test_send_message_success(self, client: AsyncClient, test_chat, member_user_id, member_headers):
        """메시지 전송 성공 - 발신자는 토큰 사용자"""
        message_data = {
            "message": {
                "chat": str(test_chat.id),
                "content": "Hello, world!",
                "attachments": [{"url": "https://cdn.example.com/a.png", "name": "a.png", "size": 120}]
            }
        }

        response = await client.post("/messages/", json=message_data, headers=member_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["content"] == "Hello, world!"
        assert data["sender"] == str(member_user_id)
        assert data["chat"] == str(test_chat.id)
        assert data["read_by"] == []
        assert data["attachments"][0]["name"] == "a.png"

        chat = await ChatGroup.get(test_chat.id)
        assert str(chat.last_message) == data["id"]

    @pytest.mark.asyncio
    async def test_client_supplied_sender_is_ignored(self, client: AsyncClient, test_chat, admin_user_id, member_user_id, member_headers):
        """요청 본문의 sender 값은 무시"""
        message_data = {
            "message": {"chat": str(test_chat.id), "content": "spoof", "sender": str(admin_user_id)},
            "sender": str(admin_user_id)
        }

        response = await client.post("/messages/", json=message_data, headers=member_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["sender"] == str(member_user_id)

    @pytest.mark.asyncio
    async def test_send_message_as_outsider(self, client: AsyncClient, test_chat, outsider_headers):
        """비참여자는 전송 불가 (404)"""
        message_data = {"message": {"chat": str(test_chat.id), "content": "let me in"}}

        response = await client.post("/messages/", json=message_data, headers=outsider_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert await Message.find(Message.chat == test_chat.id).count() == 0

    @pytest.mark.asyncio
    async def test_send_empty_message(self, client: AsyncClient, test_chat, member_headers):
        """빈 메시지는 400"""
        message_data = {"message": {"chat": str(test_chat.id), "content": "   "}}

        response = await client.post("/messages/", json=message_data, headers=member_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_send_message_missing_body(self, client: AsyncClient, member_headers):
        """본문 누락은 400"""
        response = await client.post("/messages/", json={}, headers=member_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_last_message_failure_does_not_fail_send(self, test_chat, member_user_id):
        """last_message 갱신 실패는 전송 실패로 이어지지 않음"""
        with patch(
            "chat_api.services.chat_group_service.touch_last_message",
            new=AsyncMock(side_effect=RuntimeError("write failed"))
        ):
            message = await message_service.send_message(str(test_chat.id), member_user_id, "still sent")

        assert await Message.get(message.id) is not None
        chat = await ChatGroup.get(test_chat.id)
        assert chat.last_message is None


class TestGetMessagesAPI:
    """메시지 목록 조회 API 테스트"""

    @pytest.mark.asyncio
    async def test_get_messages_chronological(self, client: AsyncClient, test_chat, test_messages, member_headers):
        """페이지 안에서는 오래된 메시지부터 정렬"""
        response = await client.get(f"/messages/chat/{test_chat.id}", headers=member_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [m["content"] for m in data["messages"]] == ["Hello team", "Hi there", "Deploy is ready"]
        assert data["total_count"] == 3
        assert data["has_more"] is False
        assert data["page"] == 1
        assert data["limit"] == 20

    @pytest.mark.asyncio
    async def test_get_messages_pagination(self, client: AsyncClient, test_chat, test_messages, member_headers):
        """1페이지는 최신 메시지, 2페이지는 그 이전 메시지"""
        first = await client.get(f"/messages/chat/{test_chat.id}?page=1&limit=2", headers=member_headers)
        second = await client.get(f"/messages/chat/{test_chat.id}?page=2&limit=2", headers=member_headers)

        assert [m["content"] for m in first.json()["messages"]] == ["Hi there", "Deploy is ready"]
        assert first.json()["has_more"] is True
        assert [m["content"] for m in second.json()["messages"]] == ["Hello team"]
        assert second.json()["has_more"] is False

    @pytest.mark.asyncio
    async def test_get_messages_excludes_deleted(self, client: AsyncClient, test_chat, test_messages, member_headers):
        """삭제된 메시지는 목록과 개수에서 제외"""
        test_messages[0].soft_delete(test_messages[0].sender)
        await test_messages[0].save()

        response = await client.get(f"/messages/chat/{test_chat.id}", headers=member_headers)

        data = response.json()
        assert "Hello team" not in [m["content"] for m in data["messages"]]
        assert data["total_count"] == 2

    @pytest.mark.asyncio
    async def test_get_messages_invalid_limit(self, client: AsyncClient, test_chat, member_headers):
        """limit 최대값 초과는 400"""
        response = await client.get(f"/messages/chat/{test_chat.id}?limit=101", headers=member_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_get_messages_as_outsider(self, client: AsyncClient, test_chat, test_messages, outsider_headers):
        """비참여자는 조회 불가"""
        response = await client.get(f"/messages/chat/{test_chat.id}", headers=outsider_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestUpdateDeleteMessageAPI:
    """메시지 수정/삭제 API 테스트"""

    @pytest.mark.asyncio
    async def test_update_own_message(self, client: AsyncClient, test_messages, admin_headers):
        """작성자는 수정 가능, 다시 읽으면 새 내용"""
        message = test_messages[0]

        response = await client.put(f"/messages/{message.id}", json={"content": "Hello everyone"}, headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        stored = await Message.get(message.id)
        assert stored.content == "Hello everyone"
        assert stored.is_edited is True

    @pytest.mark.asyncio
    async def test_update_with_blank_content_keeps_content(self, client: AsyncClient, test_messages, admin_headers):
        """빈 내용이면 기존 내용 유지"""
        message = test_messages[0]

        response = await client.put(f"/messages/{message.id}", json={"content": ""}, headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["content"] == "Hello team"
        assert response.json()["is_edited"] is True

    @pytest.mark.asyncio
    async def test_update_others_message_is_not_found(self, client: AsyncClient, test_messages, member_headers):
        """다른 사람의 메시지는 존재하지 않는 메시지와 같은 404"""
        response = await client.put(f"/messages/{test_messages[0].id}", json={"content": "mine now"}, headers=member_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Message not found or not authorized"

    @pytest.mark.asyncio
    async def test_update_malformed_message_id(self, client: AsyncClient, member_headers):
        """형식이 잘못된 메시지 ID는 404"""
        response = await client.put("/messages/not-an-id", json={"content": "x"}, headers=member_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_own_message(self, client: AsyncClient, test_messages, admin_user_id, admin_headers):
        """작성자는 소프트 삭제 가능"""
        message = test_messages[0]

        response = await client.delete(f"/messages/{message.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        stored = await Message.get(message.id)
        assert stored.deleted is True
        assert stored.deleted_by == admin_user_id
        assert stored.deleted_at is not None

    @pytest.mark.asyncio
    async def test_delete_others_message(self, client: AsyncClient, test_messages, member_headers):
        """다른 사람의 메시지는 삭제 불가"""
        response = await client.delete(f"/messages/{test_messages[0].id}", headers=member_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert (await Message.get(test_messages[0].id)).deleted is False

    @pytest.mark.asyncio
    async def test_update_deleted_message(self, client: AsyncClient, test_messages, admin_headers):
        """삭제된 메시지는 수정 불가"""
        message = test_messages[0]
        await client.delete(f"/messages/{message.id}", headers=admin_headers)

        response = await client.put(f"/messages/{message.id}", json={"content": "back"}, headers=admin_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestMarkReadAPI:
    """메시지 읽음 처리 API 테스트"""

    @pytest.mark.asyncio
    async def test_mark_read_twice_records_once(self, client: AsyncClient, test_messages, member_user_id, member_headers):
        """두 번 읽음 처리해도 한 번만 기록"""
        message = test_messages[0]

        first = await client.post(f"/messages/{message.id}/read", headers=member_headers)
        second = await client.post(f"/messages/{message.id}/read", headers=member_headers)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        stored = await Message.get(message.id)
        assert stored.read_by == [member_user_id]

    @pytest.mark.asyncio
    async def test_mark_read_as_outsider(self, client: AsyncClient, test_messages, outsider_headers):
        """비참여자는 읽음 처리 불가"""
        response = await client.post(f"/messages/{test_messages[0].id}/read", headers=outsider_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert (await Message.get(test_messages[0].id)).read_by == []

    @pytest.mark.asyncio
    async def test_mark_read_missing_message(self, client: AsyncClient, member_headers):
        """존재하지 않는 메시지는 404"""
        response = await client.post(f"/messages/{PydanticObjectId()}/read", headers=member_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestSearchMessagesAPI:
    """메시지 검색 API 테스트"""

    @pytest.mark.asyncio
    async def test_search_case_insensitive(self, client: AsyncClient, test_chat, test_messages, member_headers):
        """대소문자 무시 부분 일치 검색"""
        response = await client.get(f"/messages/chat/{test_chat.id}/search?query=HELLO", headers=member_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [m["content"] for m in data["messages"]] == ["Hello team"]
        assert data["query"] == "HELLO"

    @pytest.mark.asyncio
    async def test_search_newest_first(self, client: AsyncClient, test_chat, test_messages, member_headers):
        """최신 메시지부터 반환"""
        response = await client.get(f"/messages/chat/{test_chat.id}/search?query=e", headers=member_headers)

        contents = [m["content"] for m in response.json()["messages"]]
        assert contents == ["Deploy is ready", "Hi there", "Hello team"]

    @pytest.mark.asyncio
    async def test_search_excludes_deleted(self, client: AsyncClient, test_chat, test_messages, admin_headers):
        """삭제된 메시지는 검색되지 않음"""
        await client.delete(f"/messages/{test_messages[0].id}", headers=admin_headers)

        response = await client.get(f"/messages/chat/{test_chat.id}/search?query=hello", headers=admin_headers)

        assert response.json()["messages"] == []

    @pytest.mark.asyncio
    async def test_search_treats_query_literally(self, client: AsyncClient, test_chat, test_messages, member_headers):
        """정규식 특수문자는 문자 그대로 검색"""
        response = await client.get(f"/messages/chat/{test_chat.id}/search", params={"query": ".*"}, headers=member_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["messages"] == []

    @pytest.mark.asyncio
    async def test_search_requires_query(self, client: AsyncClient, test_chat, member_headers):
        """검색어 누락은 400"""
        response = await client.get(f"/messages/chat/{test_chat.id}/search", headers=member_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_search_result_limit(self, client: AsyncClient, test_chat, admin_user_id, member_headers):
        """검색 결과는 최대 50개"""
        for index in range(55):
            await Message(chat=test_chat.id, sender=admin_user_id, content=f"status update {index}").insert()

        response = await client.get(f"/messages/chat/{test_chat.id}/search?query=status", headers=member_headers)

        assert len(response.json()["messages"]) == 50
