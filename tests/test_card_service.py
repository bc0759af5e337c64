"""名片批次服務測試"""

import pytest
from unittest.mock import Mock

from src.vcardqr.core.exceptions import (
    ContactNotFoundError,
    StorageUnavailableError,
    StorageWriteError,
)
from src.vcardqr.core.services.card_service import CardBatchService, stored_fields, DEMO_CONTACT
from src.vcardqr.core.services.csv_pipeline import parse_csv
from src.vcardqr.core.services.monitoring import MonitoringService
from src.vcardqr.infrastructure.auth.identity import AuthSession
from src.vcardqr.infrastructure.qr.qr_renderer import QRRenderer
from src.vcardqr.infrastructure.storage.contact_store import InMemoryContactStore

ORIGIN = "https://cards.example.com"


@pytest.fixture
def store():
    return InMemoryContactStore(app_id="test-app")


@pytest.fixture
def service(store):
    return CardBatchService(
        contact_store=store,
        qr_renderer=QRRenderer(box_size=1, border=1),
        monitoring=MonitoringService(enabled=False),
        session=AuthSession(uid="anon-1", token="t", anonymous=True),
    )


class TestStoredFields:

    def test_fields(self, sample_contact):
        contact = sample_contact.model_copy(update={"vcf_content": "BEGIN:VCARD\nEND:VCARD"})
        fields = stored_fields(contact, "B", timestamp=42)

        assert fields == {
            "ID": "emp-001",
            "Name": "Jane Doe",
            "Phone": "555-1234",
            "Email": "jane@x.com",
            "Organization": "Acme Corp",
            "Title": "Engineer",
            "VcfContent": "BEGIN:VCARD\nEND:VCARD",
            "Template": "B",
            "timestamp": 42,
        }

    def test_absent_fields_not_written(self):
        contact = parse_csv("Name\nBob\n")[0]
        fields = stored_fields(contact, "A")

        assert "Phone" not in fields
        assert isinstance(fields["timestamp"], int)


class TestProcessUpload:
    """批次處理測試"""

    def test_saves_and_builds_qr_codes(self, service, store, sample_csv):
        result, outcome = service.process_upload(sample_csv, "A", ORIGIN, "/")

        assert outcome.found == 2
        assert outcome.saved == 2
        assert outcome.skipped_rows == 1
        assert outcome.completed_at is not None
        assert outcome.duration_ms >= 0
        assert [item.contact_id for item in outcome.qr_codes] == ["local-1", "local-3"]
        assert outcome.qr_codes[0].url == f"{ORIGIN}/?id=local-1&t=A"
        assert outcome.qr_codes[0].label == "Jane Doe"

        saved = store.get("local-3")
        assert saved["Name"] == "Bob"
        assert saved["Template"] == "A"
        assert saved["VcfContent"].startswith("BEGIN:VCARD")

    def test_label_fallback(self, service):
        _, outcome = service.process_upload("Phone\n555\n", "C", ORIGIN, "/")
        assert outcome.qr_codes[0].label == "Contact 1"

    def test_empty_document(self, service):
        result, outcome = service.process_upload("Name,Phone\n", "A", ORIGIN, "/")

        assert result.contacts == []
        assert outcome.found == 0
        assert outcome.qr_codes == []

    def test_partial_storage_failure(self, sample_csv):
        """單筆寫入失敗不影響其他筆，也不產生 QR Code"""
        store = Mock()
        store.upsert.side_effect = [StorageWriteError("local-1"), None]
        monitoring = Mock()
        service = CardBatchService(store, QRRenderer(box_size=1, border=1), monitoring=monitoring)

        _, outcome = service.process_upload(sample_csv, "A", ORIGIN, "/")

        assert outcome.saved == 1
        assert outcome.failed_ids == ["local-1"]
        assert [item.contact_id for item in outcome.qr_codes] == ["local-3"]
        monitoring.capture_exception_with_context.assert_called_once()

    def test_storage_unavailable(self, sample_csv):
        """沒有儲存層時只解析並產生 QR Code"""
        service = CardBatchService(None, QRRenderer(box_size=1, border=1))
        _, outcome = service.process_upload(sample_csv, "A", ORIGIN, "/")

        assert not outcome.persisted
        assert outcome.saved == 0
        assert len(outcome.qr_codes) == 2

    def test_qr_failure_skips_only_that_contact(self, store):
        """ID 太長無法產生 QR Code 時只略過該筆"""
        monitoring = MonitoringService(enabled=False)
        service = CardBatchService(store, QRRenderer(box_size=1, border=1), monitoring=monitoring)
        long_id = "x" * 3000

        _, outcome = service.process_upload(f"ID,Name\n{long_id},Jane\nok-1,Bob\n", "A", ORIGIN, "/")

        assert outcome.saved == 2
        assert outcome.qr_failed_ids == [long_id]
        assert [item.contact_id for item in outcome.qr_codes] == ["ok-1"]
        assert monitoring.get_event_counts() == {"qr_rendering": 1}

    def test_save_contacts_without_store(self):
        service = CardBatchService(None, QRRenderer())
        with pytest.raises(StorageUnavailableError):
            service.save_contacts([], "A")


class TestLoadContact:
    """讀取聯絡人測試"""

    def test_load_saved_contact(self, service, sample_csv):
        service.process_upload(sample_csv, "B", ORIGIN, "/")
        contact = service.load_contact("local-1")

        assert contact.ID == "local-1"
        assert contact.Name == "Jane Doe"
        assert contact.Template == "B"
        assert isinstance(contact.timestamp, int)

    def test_not_found(self, service):
        with pytest.raises(ContactNotFoundError):
            service.load_contact("missing")

    def test_demo_fallback(self, store):
        service = CardBatchService(store, QRRenderer(), demo_fallback=True)
        contact = service.load_contact("any-id", "C")

        assert contact.ID == "any-id"
        assert contact.Name == DEMO_CONTACT.name
        assert contact.Template == "C"
        assert "FN:Alex R. Henderson" in contact.VcfContent.split("\n")

    def test_storage_unavailable(self):
        service = CardBatchService(None, QRRenderer())
        with pytest.raises(StorageUnavailableError):
            service.load_contact("local-1")

    def test_regenerates_missing_vcard(self, service, store):
        """舊資料沒有 VcfContent 時重新產生"""
        store.upsert("old-1", {"Name": "Jane Doe", "Email": "jane@x.com"})
        contact = service.load_contact("old-1")

        assert contact.ID == "old-1"
        assert "N:Doe;Jane;;;" in contact.VcfContent.split("\n")
