"""
vCard 3.0 序列化工具

輸出固定順序：BEGIN / VERSION / N / FN / TITLE / ORG / TEL / EMAIL / END，
以單一 \\n 連接，結尾不加換行。相同輸入必定產生相同輸出。
"""

import re
from typing import List, Tuple

from src.vcardqr.core.models.contact import ContactRecord
from src.vcardqr.core.exceptions import SerializationPreconditionError

VCARD_BEGIN = "BEGIN:VCARD"
VCARD_VERSION = "VERSION:3.0"
VCARD_END = "END:VCARD"

_WHITESPACE_RE = re.compile(r"\s+")


def escape_value(value: str) -> str:
    """跳脫分號與逗號（先分號後逗號）"""
    return value.replace(";", "\\;").replace(",", "\\,")


def split_name(name: str) -> Tuple[str, str]:
    """
    拆分姓名為 (given, family)

    第一個詞為名，其餘以單一空白連接為姓；只有一個詞時姓為空字串。
    """
    parts = [part for part in _WHITESPACE_RE.split(name.strip()) if part]
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def serialize_contact(contact: ContactRecord) -> str:
    """
    將聯絡人轉為 vCard 文字

    Args:
        contact: 聯絡人資料

    Returns:
        vCard 3.0 內容

    Raises:
        SerializationPreconditionError: 聯絡人缺少姓名、電話與 Email
    """
    if not contact.has_identifying_data:
        raise SerializationPreconditionError(details={"contact_id": contact.id})

    lines: List[str] = [VCARD_BEGIN, VCARD_VERSION]

    if contact.name:
        given, family = split_name(contact.name)
        lines.append(f"N:{family};{given};;;")
        lines.append(f"FN:{contact.name}")
    else:
        lines.append(f"FN:{contact.phone or contact.email}")

    if contact.title:
        lines.append(f"TITLE:{contact.title}")
    if contact.organization:
        lines.append(f"ORG:{contact.organization}")
    if contact.phone:
        lines.append(f"TEL;TYPE=CELL,VOICE:{escape_value(contact.phone)}")
    if contact.email:
        lines.append(f"EMAIL;TYPE=PREF,INTERNET:{escape_value(contact.email)}")

    lines.append(VCARD_END)
    return "\n".join(lines)


def download_filename(name) -> str:
    """下載檔名：姓名中的空白字元改為底線，無姓名時使用 contact"""
    stem = re.sub(r"\s", "_", name) if name else ""
    return f"{stem or 'contact'}.vcf"
