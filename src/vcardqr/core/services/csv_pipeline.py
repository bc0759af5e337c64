"""
CSV 聯絡人處理流程

CSV 文字 → 標題對應 → 逐列驗證 → 指派 ID → vCard 序列化。
純函數：不做 I/O、不依賴儲存層，單列失敗只會略過該列。
"""

from typing import List, Optional
import structlog

from src.vcardqr.core.models.contact import CanonicalField, ContactRecord, PipelineResult
from src.vcardqr.core.exceptions import (
    MalformedRowError,
    InsufficientContactDataError,
    VCardQRException,
)
from src.vcardqr.core.utils.header_resolver import HeaderResolver, default_header_resolver
from src.vcardqr.core.utils.row_validator import build_contact
from src.vcardqr.core.utils.vcard_serializer import serialize_contact

logger = structlog.get_logger()

CSV_DELIMITER = ","
SYNTHETIC_ID_PREFIX = "local-"


def split_lines(csv_text: str) -> List[str]:
    """只以 LF 切分並略過空白列（CRLF 的 CR 由 split_cells 去除）"""
    return [line for line in csv_text.split("\n") if line.strip()]


def split_cells(line: str) -> List[str]:
    # 不支援引號欄位：值中的逗號一律視為分隔符
    return [cell.strip() for cell in line.split(CSV_DELIMITER)]


def synthetic_id(line_index: int) -> str:
    return f"{SYNTHETIC_ID_PREFIX}{line_index}"


class CsvContactPipeline:
    """CSV 轉聯絡人處理器"""

    def __init__(self, header_resolver: Optional[HeaderResolver] = None):
        self.header_resolver = header_resolver or default_header_resolver

    def run(self, csv_text: str) -> PipelineResult:
        """
        解析整份 CSV 文件

        Args:
            csv_text: 完整 CSV 文字（第一列為標題）

        Returns:
            PipelineResult，contacts 依輸入順序排列；少於兩列時為空結果
        """
        lines = split_lines(csv_text)
        if len(lines) < 2:
            logger.info("CSV document has no data rows", line_count=len(lines))
            return PipelineResult()

        headers = self.header_resolver.resolve(split_cells(lines[0]))
        result = PipelineResult(total_rows=len(lines) - 1)

        for line_index in range(1, len(lines)):
            try:
                contact = self.process_row(lines[line_index], headers, line_index)
            except MalformedRowError as e:
                result.malformed_rows += 1
                logger.debug("Skipping malformed row", line_index=line_index, error=str(e))
                continue
            except InsufficientContactDataError as e:
                result.insufficient_rows += 1
                logger.debug("Skipping row without contact data", line_index=line_index, error=str(e))
                continue
            except VCardQRException as e:
                result.failed_rows += 1
                logger.warning("Skipping row that failed processing",
                               line_index=line_index,
                               error=str(e),
                               error_type=type(e).__name__)
                continue

            result.contacts.append(contact)

        logger.info("CSV document processed",
                    total_rows=result.total_rows,
                    valid_contacts=len(result.contacts),
                    malformed_rows=result.malformed_rows,
                    insufficient_rows=result.insufficient_rows)
        return result

    def process_row(
        self,
        line: str,
        headers: List[Optional[CanonicalField]],
        line_index: int,
    ) -> ContactRecord:
        """處理單列：驗證、補 ID、產生 vCard"""
        candidate = build_contact(split_cells(line), headers, line_index)

        contact_id = candidate.id or synthetic_id(line_index)
        with_id = candidate.model_copy(update={"id": contact_id})
        return with_id.model_copy(update={"vcf_content": serialize_contact(with_id)})


def parse_csv(csv_text: str) -> List[ContactRecord]:
    """使用預設同義詞表解析 CSV，回傳有效聯絡人"""
    return CsvContactPipeline().run(csv_text).contacts
