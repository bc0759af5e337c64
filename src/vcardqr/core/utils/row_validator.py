from typing import Dict, Optional, Sequence

from src.vcardqr.core.models.contact import CanonicalField, ContactRecord, IDENTIFYING_FIELDS
from src.vcardqr.core.exceptions import MalformedRowError, InsufficientContactDataError


def build_contact(
    cells: Sequence[str],
    headers: Sequence[Optional[CanonicalField]],
    line_index: int = 0,
) -> ContactRecord:
    """
    由單列儲存格建立候選聯絡人

    Args:
        cells: 已切分的儲存格
        headers: HeaderResolver 的對應結果
        line_index: 來源列號（僅用於錯誤訊息）

    Returns:
        ContactRecord（尚未指派 ID 與 vCard）

    Raises:
        MalformedRowError: 儲存格數與標題數不符
        InsufficientContactDataError: 缺少姓名、電話與 Email
    """
    if len(cells) != len(headers):
        raise MalformedRowError(line_index, len(cells), len(headers))

    values: Dict[CanonicalField, str] = {}
    for field, cell in zip(headers, cells):
        if field is None:
            continue
        value = cell.strip()
        if value:
            values[field] = value

    if not any(field in values for field in IDENTIFYING_FIELDS):
        raise InsufficientContactDataError(line_index, details={"fields": [f.value for f in values]})

    return ContactRecord.from_fields(values)
