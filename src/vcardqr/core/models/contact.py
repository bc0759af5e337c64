from enum import Enum
from typing import Optional, List, Dict, Mapping
from pydantic import BaseModel, ConfigDict, Field


class CanonicalField(str, Enum):
    """系統認得的聯絡人欄位"""

    ID = "ID"
    NAME = "Name"
    PHONE = "Phone"
    EMAIL = "Email"
    ORGANIZATION = "Organization"
    TITLE = "Title"

    @property
    def attr(self) -> str:
        return _FIELD_ATTRS[self]


_FIELD_ATTRS = {
    CanonicalField.ID: "id",
    CanonicalField.NAME: "name",
    CanonicalField.PHONE: "phone",
    CanonicalField.EMAIL: "email",
    CanonicalField.ORGANIZATION: "organization",
    CanonicalField.TITLE: "title",
}

# 至少需要其中一項才算有效聯絡人
IDENTIFYING_FIELDS = (CanonicalField.NAME, CanonicalField.PHONE, CanonicalField.EMAIL)


class ContactRecord(BaseModel):
    """聯絡人資料模型（建立後不可變）"""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(None, description="聯絡人 ID")
    name: Optional[str] = Field(None, description="姓名")
    phone: Optional[str] = Field(None, description="電話號碼")
    email: Optional[str] = Field(None, description="電子郵件")
    organization: Optional[str] = Field(None, description="公司名稱")
    title: Optional[str] = Field(None, description="職稱")

    # 序列化後的 vCard 內容
    vcf_content: Optional[str] = Field(None, description="vCard 內容")

    @classmethod
    def from_fields(cls, values: Mapping[CanonicalField, str], **extra) -> "ContactRecord":
        """由 CanonicalField 對應表建立聯絡人"""
        data = {field.attr: value for field, value in values.items()}
        data.update(extra)
        return cls(**data)

    def get(self, field: CanonicalField) -> Optional[str]:
        return getattr(self, field.attr)

    def canonical_fields(self) -> Dict[CanonicalField, str]:
        """回傳所有有值的標準欄位（依 CanonicalField 順序）"""
        return {field: self.get(field) for field in CanonicalField if self.get(field)}

    @property
    def has_identifying_data(self) -> bool:
        return any(self.get(field) for field in IDENTIFYING_FIELDS)


class PipelineStatus(str, Enum):
    """CSV 處理結果狀態"""
    OK = "ok"
    EMPTY = "empty"


class PipelineResult(BaseModel):
    """CSV 批次解析結果"""

    contacts: List[ContactRecord] = []
    total_rows: int = 0
    malformed_rows: int = 0
    insufficient_rows: int = 0
    failed_rows: int = 0

    @property
    def status(self) -> PipelineStatus:
        return PipelineStatus.OK if self.contacts else PipelineStatus.EMPTY

    @property
    def skipped_rows(self) -> int:
        return self.malformed_rows + self.insufficient_rows + self.failed_rows
