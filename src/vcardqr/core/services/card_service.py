"""
名片批次服務

串接 CSV 處理流程、儲存層與 QR Code 產生器。
儲存層與身分皆由建構子注入；每筆聯絡人獨立寫入，單筆失敗不影響其他筆。
"""

from datetime import datetime
from typing import Dict, Any, List, Optional, Tuple
import structlog

from src.vcardqr.core.models.contact import CanonicalField, ContactRecord, PipelineResult
from src.vcardqr.core.models.card import StoredContact, QRCodeItem, BatchOutcome
from src.vcardqr.core.exceptions import (
    ContactNotFoundError,
    QRRenderError,
    StorageError,
    StorageUnavailableError,
)
from src.vcardqr.core.services.csv_pipeline import CsvContactPipeline
from src.vcardqr.core.services.monitoring import MonitoringService, EventCategory
from src.vcardqr.core.utils.vcard_serializer import serialize_contact
from src.vcardqr.infrastructure.storage.contact_store import ContactStore, now_millis
from src.vcardqr.infrastructure.qr.qr_renderer import QRRenderer

logger = structlog.get_logger()


# 範本預覽用的示範聯絡人
DEMO_CONTACT = ContactRecord(
    name="Alex R. Henderson",
    title="Lead Software Architect",
    organization="Acme Tech Solutions",
    phone="+1 (555) 123-4567",
    email="alex.henderson@acmetech.com",
)


def stored_fields(contact: ContactRecord, template_key: str, timestamp: Optional[int] = None) -> Dict[str, Any]:
    """組出寫入儲存層的欄位：標準欄位 + VcfContent + Template + timestamp"""
    fields: Dict[str, Any] = {field.value: value for field, value in contact.canonical_fields().items()}
    fields["VcfContent"] = contact.vcf_content
    fields["Template"] = template_key
    fields["timestamp"] = timestamp if timestamp is not None else now_millis()
    return fields


def demo_contact(contact_id: str, template_key: Optional[str]) -> StoredContact:
    return StoredContact(
        ID=contact_id,
        Name=DEMO_CONTACT.name,
        Phone=DEMO_CONTACT.phone,
        Email=DEMO_CONTACT.email,
        Organization=DEMO_CONTACT.organization,
        Title=DEMO_CONTACT.title,
        VcfContent=serialize_contact(DEMO_CONTACT),
        Template=template_key,
    )


class CardBatchService:
    """名片批次處理服務"""

    def __init__(
        self,
        contact_store: Optional[ContactStore],
        qr_renderer: QRRenderer,
        pipeline: Optional[CsvContactPipeline] = None,
        monitoring: Optional[MonitoringService] = None,
        session=None,
        demo_fallback: bool = False,
    ):
        """
        Args:
            contact_store: 儲存層；為 None 表示儲存初始化失敗，略過寫入
            qr_renderer: QR Code 產生器
            pipeline: CSV 處理流程
            monitoring: 監控服務
            session: AuthSession（僅用於日誌）
            demo_fallback: 找不到聯絡人時是否改用示範聯絡人
        """
        self.contact_store = contact_store
        self.qr_renderer = qr_renderer
        self.pipeline = pipeline or CsvContactPipeline()
        self.monitoring = monitoring or MonitoringService()
        self.session = session
        self.demo_fallback = demo_fallback

    @property
    def storage_available(self) -> bool:
        return self.contact_store is not None

    @property
    def session_uid(self) -> Optional[str]:
        return self.session.uid if self.session else None

    def process_upload(
        self,
        csv_text: str,
        template_key: str,
        origin: str,
        path: str,
    ) -> Tuple[PipelineResult, BatchOutcome]:
        """
        處理上傳的 CSV：解析、儲存、產生 QR Code

        Args:
            csv_text: CSV 文字
            template_key: 名片範本代號
            origin: QR 網址的 origin（例如 https://cards.example.com）
            path: QR 網址的路徑

        Returns:
            (解析結果, 批次結果)
        """
        result = self.pipeline.run(csv_text)
        outcome = BatchOutcome(
            template_key=template_key,
            found=len(result.contacts),
            skipped_rows=result.skipped_rows,
            persisted=self.storage_available,
        )

        if not result.contacts:
            outcome.completed_at = datetime.now()
            return result, outcome

        contacts = result.contacts
        if self.storage_available:
            contacts, failed_ids = self.save_contacts(result.contacts, template_key)
            outcome.saved = len(contacts)
            outcome.failed_ids = failed_ids
        else:
            logger.warning("Storage unavailable, skipping database save",
                          contact_count=len(contacts))

        outcome.qr_codes = self.build_qr_codes(
            contacts, template_key, origin, path, failed_ids=outcome.qr_failed_ids
        )
        outcome.completed_at = datetime.now()

        logger.info("Batch processing completed",
                   session_uid=self.session_uid,
                   template=template_key,
                   found=outcome.found,
                   saved=outcome.saved,
                   failed=len(outcome.failed_ids),
                   qr_codes=len(outcome.qr_codes),
                   qr_failed=len(outcome.qr_failed_ids),
                   success_rate=round(outcome.success_rate, 3),
                   duration_ms=outcome.duration_ms)
        return result, outcome

    def save_contacts(self, contacts: List[ContactRecord], template_key: str) -> Tuple[List[ContactRecord], List[str]]:
        """
        逐筆寫入聯絡人

        Returns:
            (成功寫入的聯絡人, 失敗的 ID)
        """
        if self.contact_store is None:
            raise StorageUnavailableError()

        saved: List[ContactRecord] = []
        failed_ids: List[str] = []
        for contact in contacts:
            try:
                self.contact_store.upsert(contact.id, stored_fields(contact, template_key))
                saved.append(contact)
            except StorageError as e:
                failed_ids.append(contact.id)
                self.monitoring.capture_exception_with_context(
                    e,
                    EventCategory.DATA_STORAGE,
                    extra_context={"contact_id": contact.id, "session_uid": self.session_uid}
                )
        return saved, failed_ids

    def build_qr_codes(
        self,
        contacts: List[ContactRecord],
        template_key: str,
        origin: str,
        path: str,
        failed_ids: Optional[List[str]] = None,
    ) -> List[QRCodeItem]:
        """
        為每位有 ID 的聯絡人產生 QR Code

        單筆產生失敗（例如 ID 太長超出 QR 容量）只略過該筆，ID 會加入 failed_ids
        """
        items: List[QRCodeItem] = []
        for index, contact in enumerate(contacts):
            try:
                rendered = self.qr_renderer.render_card_qr(origin, path, contact.id, template_key)
            except QRRenderError as e:
                if failed_ids is not None:
                    failed_ids.append(contact.id)
                self.monitoring.capture_exception_with_context(
                    e,
                    EventCategory.QR_RENDERING,
                    extra_context={"id_length": len(contact.id), "session_uid": self.session_uid}
                )
                continue
            if rendered is None:
                continue
            url, data_uri = rendered
            items.append(QRCodeItem(
                contact_id=contact.id,
                label=contact.name or f"Contact {index + 1}",
                url=url,
                image_data_uri=data_uri,
            ))
        return items

    def load_contact(self, contact_id: str, template_key: Optional[str] = None) -> StoredContact:
        """
        讀取已儲存的聯絡人

        Raises:
            StorageUnavailableError: 儲存層未初始化
            ContactNotFoundError: 找不到且未啟用示範聯絡人
            StorageReadError: 讀取失敗
        """
        if self.contact_store is None:
            raise StorageUnavailableError()

        data = self.contact_store.get(contact_id)
        if data is None:
            if self.demo_fallback:
                logger.warning("Contact not found, using demo contact", contact_id=contact_id)
                return demo_contact(contact_id, template_key)
            raise ContactNotFoundError(contact_id)

        data.setdefault(CanonicalField.ID.value, contact_id)
        stored = StoredContact.model_validate(data)
        if not stored.VcfContent:
            # 舊資料沒有 vCard 內容時依欄位重新產生
            record = ContactRecord.from_fields(
                {field: data[field.value] for field in CanonicalField if data.get(field.value)}
            )
            if record.has_identifying_data:
                stored = stored.model_copy(update={"VcfContent": serialize_contact(record)})
        return stored
