"""
聯絡人儲存層

ContactStore 是注入到服務層的儲存能力物件：
- RedisContactStore: 以 Redis hash 儲存，HSET 本身即為合併寫入
- InMemoryContactStore: 單一程序內的字典儲存（本機開發 / 測試）
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import threading
import time
import redis
import structlog

from src.vcardqr.core.exceptions import StorageWriteError, StorageReadError, StorageUnavailableError

logger = structlog.get_logger()

BACKEND_REDIS = "redis"
BACKEND_MEMORY = "memory"


def now_millis() -> int:
    return int(time.time() * 1000)


class ContactStore(ABC):
    """聯絡人儲存介面"""

    backend_name = "abstract"

    def __init__(self, app_id: str, key_prefix: str = "vcardqr"):
        self.app_id = app_id
        self.key_prefix = key_prefix

    def key_for(self, contact_id: str) -> str:
        """生成儲存 key"""
        return f"{self.key_prefix}:{self.app_id}:vcards:{contact_id}"

    @abstractmethod
    def upsert(self, contact_id: str, fields: Dict[str, Any]) -> None:
        """合併寫入：未出現在 fields 的既有欄位保留不變"""

    @abstractmethod
    def get(self, contact_id: str) -> Optional[Dict[str, str]]:
        """讀取聯絡人，不存在時回傳 None"""

    @property
    def persists_across_restarts(self) -> bool:
        return False


class RedisContactStore(ContactStore):
    """Redis hash 儲存"""

    backend_name = BACKEND_REDIS

    def __init__(self, redis_client, app_id: str, key_prefix: str = "vcardqr"):
        super().__init__(app_id, key_prefix)
        self.redis_client = redis_client
        logger.info("RedisContactStore initialized", app_id=app_id, key_prefix=key_prefix)

    @property
    def persists_across_restarts(self) -> bool:
        return True

    def upsert(self, contact_id: str, fields: Dict[str, Any]) -> None:
        mapping = {key: str(value) for key, value in fields.items() if value is not None}
        try:
            self.redis_client.hset(self.key_for(contact_id), mapping=mapping)
        except redis.RedisError as e:
            logger.error("Failed to save contact to Redis",
                        contact_id=contact_id,
                        error=str(e),
                        error_type=type(e).__name__)
            raise StorageWriteError(contact_id, details={"error": str(e)}) from e

    def get(self, contact_id: str) -> Optional[Dict[str, str]]:
        try:
            data = self.redis_client.hgetall(self.key_for(contact_id))
        except redis.RedisError as e:
            logger.error("Failed to load contact from Redis",
                        contact_id=contact_id,
                        error=str(e))
            raise StorageReadError(contact_id, details={"error": str(e)}) from e
        return data or None


class InMemoryContactStore(ContactStore):
    """記憶體儲存（重啟即消失）"""

    backend_name = BACKEND_MEMORY

    def __init__(self, app_id: str = "default-app-id", key_prefix: str = "vcardqr"):
        super().__init__(app_id, key_prefix)
        self._records: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()
        logger.info("InMemoryContactStore initialized", app_id=app_id)

    def upsert(self, contact_id: str, fields: Dict[str, Any]) -> None:
        mapping = {key: str(value) for key, value in fields.items() if value is not None}
        with self._lock:
            self._records.setdefault(self.key_for(contact_id), {}).update(mapping)

    def get(self, contact_id: str) -> Optional[Dict[str, str]]:
        with self._lock:
            record = self._records.get(self.key_for(contact_id))
            return dict(record) if record else None

    def __len__(self) -> int:
        return len(self._records)


def create_contact_store(settings, redis_client=None) -> ContactStore:
    """
    依設定建立儲存層

    Args:
        settings: 應用程式設定（storage_backend, app_id, storage_key_prefix）
        redis_client: 既有 Redis 客戶端；redis 模式下未提供時自動建立

    Raises:
        StorageUnavailableError: redis 模式下無法連線，或 backend 名稱未知
    """
    backend = settings.storage_backend.strip().lower()

    if backend == BACKEND_MEMORY:
        return InMemoryContactStore(app_id=settings.app_id, key_prefix=settings.storage_key_prefix)

    if backend == BACKEND_REDIS:
        if redis_client is None:
            from src.vcardqr.infrastructure.redis_client import create_redis_client
            redis_client = create_redis_client(settings)
        return RedisContactStore(redis_client, app_id=settings.app_id, key_prefix=settings.storage_key_prefix)

    logger.error("Unknown storage backend", storage_backend=settings.storage_backend)
    raise StorageUnavailableError(details={"storage_backend": settings.storage_backend})
