import pytest
import os
import sys

# 添加項目根目錄到 Python 路徑
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from simple_config import Settings
from src.vcardqr.api.web.main import create_app
from src.vcardqr.core.models.contact import ContactRecord
from src.vcardqr.infrastructure.storage.contact_store import InMemoryContactStore


@pytest.fixture
def test_settings():
    """測試用設定（不讀取 .env）"""
    return Settings(
        _env_file=None,
        flask_env="testing",
        secret_key="test_secret_key",
        storage_backend="memory",
        app_id="test-app",
        public_base_url="https://cards.example.com",
        sentry_dsn=None,
    )


@pytest.fixture
def contact_store():
    """記憶體儲存"""
    return InMemoryContactStore(app_id="test-app")


@pytest.fixture
def app(test_settings, contact_store):
    """Flask 應用"""
    flask_app = create_app(test_settings, contact_store=contact_store)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask 測試客戶端"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def sample_contact():
    """範例聯絡人"""
    return ContactRecord(
        id="emp-001",
        name="Jane Doe",
        phone="555-1234",
        email="jane@x.com",
        organization="Acme Corp",
        title="Engineer",
    )


@pytest.fixture
def sample_csv():
    """範例 CSV"""
    return (
        "Name,Phone,Email\n"
        "Jane Doe,555-1234,jane@x.com\n"
        ",,\n"
        "Bob,,bob@x.com\n"
    )
