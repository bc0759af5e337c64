from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


class StoredContact(BaseModel):
    """儲存後的名片資料（對應儲存層的欄位名稱）"""

    ID: str
    Name: Optional[str] = None
    Phone: Optional[str] = None
    Email: Optional[str] = None
    Organization: Optional[str] = None
    Title: Optional[str] = None
    VcfContent: str = ""
    Template: Optional[str] = None
    timestamp: Optional[int] = Field(None, description="寫入時間 (epoch ms)")


class QRCodeItem(BaseModel):
    """單張 QR Code 輸出"""

    contact_id: str
    label: str
    url: str
    image_data_uri: str


class BatchOutcome(BaseModel):
    """批次處理結果"""

    template_key: str
    found: int = 0
    saved: int = 0
    failed_ids: List[str] = []
    skipped_rows: int = 0
    qr_codes: List[QRCodeItem] = []
    qr_failed_ids: List[str] = []
    persisted: bool = True
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        if self.found == 0:
            return 0.0
        return self.saved / self.found

    @property
    def duration_ms(self) -> Optional[int]:
        if self.completed_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds() * 1000)
