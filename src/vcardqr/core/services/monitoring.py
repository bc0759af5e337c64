"""
Sentry 監控服務
提供錯誤追蹤與業務上下文
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional
import structlog
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

logger = structlog.get_logger()


class EventCategory(Enum):
    """事件分類"""
    DATA_STORAGE = "data_storage"
    QR_RENDERING = "qr_rendering"
    AUTH = "auth"


def init_sentry(dsn: Optional[str], environment: str) -> bool:
    """初始化 Sentry；未設定 DSN 時不啟用"""
    if not dsn:
        logger.info("Sentry DSN not configured, monitoring disabled")
        return False

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration(transaction_style="endpoint")],
        environment=environment,
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("Sentry monitoring initialized", environment=environment)
    return True


class MonitoringService:
    """Sentry 監控服務"""

    def __init__(self, enabled: bool = False):
        self.is_enabled = enabled
        self._event_counters: Dict[str, int] = {}

    def capture_exception_with_context(
        self,
        exception: Exception,
        category: EventCategory,
        extra_context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        捕獲異常並添加業務上下文

        Args:
            exception: 異常物件
            category: 事件分類
            extra_context: 額外上下文資訊
        """
        counter_key = category.value
        self._event_counters[counter_key] = self._event_counters.get(counter_key, 0) + 1

        context = {
            "category": category.value,
            "timestamp": datetime.now().isoformat(),
        }
        if extra_context:
            context.update(extra_context)

        logger.error(
            "Exception captured with context",
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            category=category.value,
            context=context
        )

        if self.is_enabled:
            with sentry_sdk.new_scope() as scope:
                scope.set_context("business_context", context)
                scope.set_tag("category", category.value)
                sentry_sdk.capture_exception(exception)

    def get_event_counts(self) -> Dict[str, int]:
        return dict(self._event_counters)
