import pytest
import pytest_asyncio
from datetime import timedelta
from typing import AsyncGenerator
from beanie import PydanticObjectId, init_beanie
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from chat_api.main import app
from chat_api.models import DOCUMENT_MODELS, ChatGroup, Message, User
from chat_api.services import chat_group_service
from chat_api.utils.auth import create_access_token
from chat_api.utils.time_utils import utc_now


# 테스트용 인메모리 MongoDB (테스트마다 새로 생성)
@pytest_asyncio.fixture(autouse=True)
async def test_database():
    """테스트용 인메모리 MongoDB + Beanie 초기화"""
    mongo_client = AsyncMongoMockClient()
    database = mongo_client.get_database("chat_group_test")
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)

    yield database

    mongo_client.close()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """테스트용 비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_token(user_id: PydanticObjectId, role: str = "Developer") -> str:
    """테스트용 토큰 (payload: id, role)"""
    return create_access_token(data={"id": str(user_id), "role": role})


def auth_headers(user_id: PydanticObjectId, role: str = "Developer") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def headers_for():
    """임의 사용자/역할의 인증 헤더 생성기"""
    return auth_headers


@pytest.fixture
def admin_user_id() -> PydanticObjectId:
    """채팅방 생성자 (플랫폼 Admin, 채팅방 admin)"""
    return PydanticObjectId()


@pytest.fixture
def member_user_id() -> PydanticObjectId:
    """채팅방 활성 참여자 (member)"""
    return PydanticObjectId()


@pytest.fixture
def outsider_user_id() -> PydanticObjectId:
    """채팅방에 참여하지 않은 사용자"""
    return PydanticObjectId()


@pytest.fixture
def admin_headers(admin_user_id) -> dict:
    return auth_headers(admin_user_id, role="Admin")


@pytest.fixture
def member_headers(member_user_id) -> dict:
    return auth_headers(member_user_id, role="Developer")


@pytest.fixture
def outsider_headers(outsider_user_id) -> dict:
    return auth_headers(outsider_user_id, role="Developer")


@pytest_asyncio.fixture
async def test_chat(admin_user_id, member_user_id) -> ChatGroup:
    """admin + 활성 member가 있는 채팅방"""
    chat = await chat_group_service.create_chat_group(
        creator_id=admin_user_id,
        name="Project Alpha",
        participant_ids=[member_user_id],
        description="Alpha team chat",
    )
    chat.activate_participant(member_user_id)
    await chat.save()
    return chat


@pytest_asyncio.fixture
async def test_messages(test_chat, admin_user_id, member_user_id) -> list:
    """채팅방 테스트 메시지 3개 (작성 순서대로)"""
    messages = []
    base_time = utc_now() - timedelta(minutes=10)
    for index, (sender, content) in enumerate([
        (admin_user_id, "Hello team"),
        (member_user_id, "Hi there"),
        (admin_user_id, "Deploy is ready"),
    ]):
        message = Message(
            chat=test_chat.id,
            sender=sender,
            content=content,
            created_at=base_time + timedelta(seconds=index)
        )
        await message.insert()
        messages.append(message)
    return messages


@pytest_asyncio.fixture
async def super_admin_user() -> User:
    """조직 소속 Super Admin 사용자"""
    user = User(
        username="superadmin",
        email="super@example.com",
        role="Super Admin",
        organization=PydanticObjectId(),
    )
    await user.insert()
    return user

