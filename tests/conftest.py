"""
pytest 配置
"""
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOG_FORMAT", "console")


@pytest.fixture(scope="session")
def test_settings():
    """测试配置"""
    from core.config import Settings
    return Settings()


@pytest.fixture
def water():
    from core.molecules.predefined import WATER
    return WATER.structure


@pytest.fixture
def methane():
    from core.molecules.predefined import METHANE
    return METHANE.structure


@pytest.fixture
def store():
    """写入了水和甲烷的存储"""
    from core.store import MoleculeStore, seed_predefined_molecules
    store = MoleculeStore()
    seed_predefined_molecules(store)
    return store


def make_completion(content):
    """构造 chat.completions.create 的返回值"""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def openai_client():
    """替身 AsyncOpenAI 客户端"""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=make_completion('{"answer": "Water is bent because of its lone pairs."}')
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def llm_client(openai_client):
    from core.config import LLMSettings
    from core.llm import LLMClient
    return LLMClient(LLMSettings(api_key="test-key", model="test-model"), client=openai_client)


@pytest.fixture
def api_client(llm_client):
    """运行了 lifespan 的测试客户端（每个测试独立存储）"""
    from fastapi.testclient import TestClient
    from api.main import create_app

    with TestClient(create_app(llm_client=llm_client)) as client:
        yield client
