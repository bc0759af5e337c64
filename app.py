#!/usr/bin/env python3
"""
CSV vCard QR 名片系統 - 主啟動文件
上傳聯絡人 CSV，產生 vCard 並輸出連回名片頁的 QR Code
"""

import os
import sys
import structlog

# 添加項目根目錄到 Python 路徑
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

# 導入配置
from simple_config import settings

# 設置日誌
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    context_class=dict,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

from src.vcardqr.api.web.main import create_app
from src.vcardqr.infrastructure.redis_client import close_redis_client

app = create_app(settings)


def main():
    """主函數"""
    logger.info("Starting CSV vCard QR Generator",
                version="1.0.0",
                port=settings.app_port,
                environment=settings.flask_env,
                storage_backend=settings.storage_backend)

    try:
        # 啟動 Flask 應用
        app.run(
            host=settings.app_host,
            port=settings.app_port,
            debug=settings.debug,
            threaded=True
        )
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.error("Application startup failed", error=str(e))
        sys.exit(1)
    finally:
        # 清理 Redis 連接
        store = app.extensions["vcardqr"]["contact_store"]
        close_redis_client(getattr(store, "redis_client", None))
        logger.info("Application shutdown complete")

# 導出 Flask 應用實例供 gunicorn 使用
application = app

if __name__ == "__main__":
    main()
