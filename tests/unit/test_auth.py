import pytest
from datetime import timedelta
from beanie import PydanticObjectId
from httpx import AsyncClient
from fastapi import status

from chat_api.utils.auth import create_access_token, decode_access_token


class TestTokenUtils:
    """토큰 유틸리티 테스트"""

    def test_create_and_decode_token(self):
        """발급한 토큰의 payload 확인"""
        user_id = str(PydanticObjectId())
        token = create_access_token({"id": user_id, "role": "Developer"})

        payload = decode_access_token(token)

        assert payload["id"] == user_id
        assert payload["role"] == "Developer"
        assert "exp" in payload

    def test_decode_expired_token(self):
        """만료된 토큰은 None"""
        token = create_access_token({"id": str(PydanticObjectId())}, expires_delta=timedelta(seconds=-1))

        assert decode_access_token(token) is None

    def test_decode_garbage_token(self):
        """형식이 잘못된 토큰은 None"""
        assert decode_access_token("not.a.token") is None


class TestAuthenticationAPI:
    """인증 의존성 테스트"""

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        """토큰 없음은 401 Unauthorized"""
        response = await client.get("/chat-group/")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Unauthorized"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        """잘못된 토큰은 401 Invalid token"""
        response = await client.get("/chat-group/", headers={"Authorization": "Bearer invalid_token"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_token_without_id(self, client: AsyncClient):
        """id가 없는 토큰은 401"""
        token = create_access_token({"role": "Admin"})

        response = await client.get("/chat-group/", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_token_with_malformed_id(self, client: AsyncClient):
        """id 형식이 잘못된 토큰은 401"""
        token = create_access_token({"id": "12345", "role": "Admin"})

        response = await client.get("/chat-group/", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient):
        """만료된 토큰은 401"""
        token = create_access_token(
            {"id": str(PydanticObjectId()), "role": "Admin"},
            expires_delta=timedelta(seconds=-1)
        )

        response = await client.get("/chat-group/", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
