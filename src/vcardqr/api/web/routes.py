"""
Card Generator / Viewer Routes

- GET  /              產生器頁面；帶 ?id= 時顯示名片頁
- POST /process       上傳 CSV、儲存並產生 QR Code
- GET  /download/<id> 下載 vCard
- GET  /health        健康檢查
"""

import os
from io import BytesIO
from datetime import datetime
from flask import Blueprint, current_app, render_template, request, url_for, jsonify, send_file
import structlog

from src.vcardqr.api.web.card_templates import TemplateKind, TEMPLATE_LABELS, render_contact_page
from src.vcardqr.core.exceptions import (
    VCardQRException,
    InvalidUploadError,
    ContactNotFoundError,
    StorageUnavailableError,
    StorageReadError,
    SerializationPreconditionError,
    UnknownTemplateError,
    get_user_friendly_message,
)
from src.vcardqr.core.utils.vcard_serializer import download_filename

logger = structlog.get_logger()

SERVICE_NAME = "CSV vCard QR Generator"
SERVICE_VERSION = "1.0.0"

# Calculate absolute paths for templates
_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.abspath(os.path.join(_current_dir, "../../../.."))

cards_bp = Blueprint(
    "cards",
    __name__,
    template_folder=os.path.join(_project_root, "templates"),
)

ERROR_STATUS = {
    ContactNotFoundError: 404,
    UnknownTemplateError: 400,
    StorageUnavailableError: 503,
    StorageReadError: 500,
    SerializationPreconditionError: 422,
}


def _card_service():
    return current_app.extensions["vcardqr"]["card_service"]


def _settings():
    return current_app.extensions["vcardqr"]["settings"]


def _error_page(error: Exception):
    status = ERROR_STATUS.get(type(error), 500)
    message = get_user_friendly_message(error, verbose=_settings().verbose_errors)
    return render_template("error.html", message=message), status


def _render_generator(status_message=None, status_level="info", outcome=None, status_code=200):
    settings = _settings()
    return render_template(
        "generator.html",
        templates=TEMPLATE_LABELS,
        selected_template=settings.default_template,
        status_message=status_message,
        status_level=status_level,
        outcome=outcome,
    ), status_code


def _qr_origin() -> str:
    settings = _settings()
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")
    return request.host_url.rstrip("/")


def _read_upload() -> str:
    """讀取上傳的 CSV 檔案（UTF-8，移除 BOM）"""
    upload = request.files.get("csvFile")
    if upload is None or not upload.filename:
        raise InvalidUploadError("missing")

    raw = upload.read(_settings().max_upload_size + 1)
    if len(raw) > _settings().max_upload_size:
        raise InvalidUploadError("too_large", details={"filename": upload.filename})

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidUploadError("encoding", details={"filename": upload.filename}) from e


# ==================== Generator ====================

@cards_bp.route("/", methods=["GET"])
def index():
    """產生器頁面；QR 掃描進入時顯示名片頁"""
    contact_id = request.args.get("id")
    if contact_id:
        template_key = request.args.get("t") or _settings().default_template
        return view_card(contact_id, template_key)
    return _render_generator()


@cards_bp.route("/process", methods=["POST"])
def process_upload():
    """處理上傳的 CSV"""
    try:
        template = TemplateKind.parse(request.form.get("template") or _settings().default_template)
        csv_text = _read_upload()
    except VCardQRException as e:
        logger.warning("Rejected CSV upload", error=str(e), error_type=type(e).__name__)
        return _render_generator(e.user_message, "error", status_code=400)

    service = _card_service()
    result, outcome = service.process_upload(
        csv_text,
        template.value,
        origin=_qr_origin(),
        path=url_for("cards.index"),
    )

    if not result.contacts:
        return _render_generator(
            "No valid contacts found. Check file format/required columns.", "error"
        )

    if not outcome.persisted:
        message = (f"Successfully parsed {outcome.found} contacts! "
                   f"(Database save skipped: storage unavailable)")
    elif outcome.failed_ids:
        message = (f"Saved {outcome.saved} of {outcome.found} contacts. "
                   f"Failed: {', '.join(outcome.failed_ids)}")
    else:
        message = f"Successfully processed and saved {outcome.saved} contacts!"

    if outcome.qr_failed_ids:
        message += (f" QR code skipped for {len(outcome.qr_failed_ids)} "
                    f"contact(s): ID too long.")

    level = "success" if outcome.qr_codes and not (outcome.failed_ids or outcome.qr_failed_ids) else "error"
    return _render_generator(message, level, outcome=outcome)


# ==================== Viewer ====================

def view_card(contact_id: str, template_key: str):
    """顯示名片頁；範本以儲存的 Template 優先"""
    service = _card_service()
    try:
        contact = service.load_contact(contact_id, template_key)
        kind = TemplateKind.parse(contact.Template or template_key)
        return render_contact_page(kind, contact)
    except VCardQRException as e:
        logger.warning("Failed to render card page",
                      contact_id=contact_id,
                      template=template_key,
                      error_type=type(e).__name__)
        return _error_page(e)


@cards_bp.route("/download/<path:contact_id>", methods=["GET"])
def download(contact_id: str):
    """下載 vCard 檔案"""
    try:
        contact = _card_service().load_contact(contact_id)
        if not contact.VcfContent:
            raise SerializationPreconditionError(details={"contact_id": contact_id})
    except VCardQRException as e:
        return _error_page(e)

    filename = download_filename(contact.Name)
    return send_file(
        BytesIO(contact.VcfContent.encode("utf-8")),
        mimetype="text/vcard",
        as_attachment=True,
        download_name=filename,
    )


# ==================== Health ====================

@cards_bp.route("/health", methods=["GET"])
def health_check():
    """健康檢查端點"""
    service = _card_service()
    store = service.contact_store
    return jsonify({
        "status": "healthy" if service.storage_available else "degraded",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "storage_backend": store.backend_name if store else None,
        "persistent": store.persists_across_restarts if store else False,
        "events": service.monitoring.get_event_counts(),
        "timestamp": str(datetime.now())
    })
