"""
CSV vCard QR 名片系統 - Flask 應用工廠

儲存層、身分與服務在此建立一次，並透過 app.extensions 注入到路由。
"""

from typing import Optional
from flask import Flask
import structlog

from src.vcardqr.api.web.routes import cards_bp
from src.vcardqr.core.exceptions import StorageUnavailableError, AuthBootstrapError
from src.vcardqr.core.services.card_service import CardBatchService
from src.vcardqr.core.services.csv_pipeline import CsvContactPipeline
from src.vcardqr.core.services.monitoring import MonitoringService, EventCategory, init_sentry
from src.vcardqr.infrastructure.auth.identity import IdentityProvider
from src.vcardqr.infrastructure.qr.qr_renderer import QRRenderer
from src.vcardqr.infrastructure.storage.contact_store import ContactStore, create_contact_store

logger = structlog.get_logger()


def create_app(settings, contact_store: Optional[ContactStore] = None) -> Flask:
    """
    建立 Flask 應用

    Args:
        settings: 應用程式設定
        contact_store: 指定儲存層（測試用）；未提供時依 settings.storage_backend 建立

    Returns:
        Flask app；儲存或身分初始化失敗時仍可啟動，但名片頁會顯示連線錯誤
    """
    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_size + 64 * 1024

    monitoring = MonitoringService(enabled=init_sentry(settings.sentry_dsn, settings.flask_env))

    session = None
    try:
        session = IdentityProvider(settings.initial_auth_token).bootstrap()
    except AuthBootstrapError as e:
        monitoring.capture_exception_with_context(e, EventCategory.AUTH)

    if session is not None and contact_store is None:
        try:
            contact_store = create_contact_store(settings)
        except StorageUnavailableError as e:
            monitoring.capture_exception_with_context(
                e, EventCategory.DATA_STORAGE, extra_context={"storage_backend": settings.storage_backend}
            )
    elif session is None:
        contact_store = None

    card_service = CardBatchService(
        contact_store=contact_store,
        qr_renderer=QRRenderer(box_size=settings.qr_box_size, border=settings.qr_border),
        pipeline=CsvContactPipeline(),
        monitoring=monitoring,
        session=session,
        demo_fallback=settings.demo_fallback,
    )

    app.extensions["vcardqr"] = {
        "settings": settings,
        "card_service": card_service,
        "contact_store": contact_store,
        "session": session,
    }
    app.register_blueprint(cards_bp)

    logger.info("Application initialized",
               storage_backend=contact_store.backend_name if contact_store else None,
               anonymous=session.anonymous if session else None,
               demo_fallback=settings.demo_fallback)
    return app
