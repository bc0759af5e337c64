"""Redis 客戶端工具模組"""
import redis
import structlog

from src.vcardqr.core.exceptions import StorageUnavailableError

logger = structlog.get_logger()


def create_redis_client(settings) -> redis.Redis:
    """
    創建 Redis 客戶端

    Args:
        settings: 應用程式設定

    Returns:
        已測試連線的 Redis 客戶端

    Raises:
        StorageUnavailableError: 連線失敗
    """
    try:
        # 優先使用 REDIS_URL
        if settings.redis_url:
            logger.info("Connecting to Redis using REDIS_URL")
            client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout,
                max_connections=settings.redis_max_connections
            )
        else:
            logger.info("Connecting to Redis using host/port configuration",
                       host=settings.redis_host,
                       port=settings.redis_port,
                       db=settings.redis_db)

            client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                password=settings.redis_password,
                db=settings.redis_db,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout,
                max_connections=settings.redis_max_connections
            )

        # 測試連接
        client.ping()
        logger.info("Redis connection established successfully")
        return client

    except redis.RedisError as e:
        logger.error("Failed to connect to Redis",
                    error=str(e),
                    redis_host=settings.redis_host,
                    redis_port=settings.redis_port)
        raise StorageUnavailableError(details={"error": str(e)}) from e


def close_redis_client(client) -> None:
    """關閉 Redis 連接"""
    if client is None:
        return
    try:
        client.close()
        logger.info("Redis connection closed")
    except redis.RedisError as e:
        logger.error("Error closing Redis connection", error=str(e))
