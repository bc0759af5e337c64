"""
CSV 標題對應工具

將任意 CSV 欄位名稱對應到固定的 CanonicalField。
比對規則：去除前後空白、轉小寫後查同義詞表，不做模糊比對。
"""

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence
import structlog

from src.vcardqr.core.models.contact import CanonicalField

logger = structlog.get_logger()


DEFAULT_SYNONYMS: Dict[CanonicalField, FrozenSet[str]] = {
    CanonicalField.ID: frozenset({"id", "contact id", "record id"}),
    CanonicalField.NAME: frozenset({"name", "full name", "contact name", "fullname"}),
    CanonicalField.PHONE: frozenset({"phone", "mobile", "cell", "telephone", "tel"}),
    CanonicalField.EMAIL: frozenset({"email", "e-mail", "mail"}),
    CanonicalField.ORGANIZATION: frozenset({"organization", "company", "org", "firm"}),
    CanonicalField.TITLE: frozenset({"title", "job title", "position", "job"}),
}


def normalize_header(raw_header: str) -> str:
    return raw_header.strip().lower()


class HeaderResolver:
    """同義詞表查詢器"""

    def __init__(self, synonyms: Optional[Mapping[CanonicalField, Iterable[str]]] = None):
        table = DEFAULT_SYNONYMS if synonyms is None else synonyms
        self._lookup: Dict[str, CanonicalField] = {}
        self.ambiguous: FrozenSet[str] = frozenset()

        owners: Dict[str, List[CanonicalField]] = {}
        for field, names in table.items():
            for name in names:
                key = normalize_header(name)
                if field not in owners.setdefault(key, []):
                    owners[key].append(field)

        ambiguous = set()
        for key, fields in owners.items():
            if len(fields) > 1:
                # 同一個同義詞出現在多個欄位：視為未對應
                ambiguous.add(key)
                logger.warning("Ambiguous header synonym ignored",
                               synonym=key,
                               fields=[f.value for f in fields])
            else:
                self._lookup[key] = fields[0]
        self.ambiguous = frozenset(ambiguous)

    def resolve_one(self, raw_header: str) -> Optional[CanonicalField]:
        return self._lookup.get(normalize_header(raw_header))

    def resolve(self, raw_headers: Sequence[str]) -> List[Optional[CanonicalField]]:
        """
        將原始標題序列對應到 CanonicalField

        Args:
            raw_headers: CSV 第一列的欄位名稱

        Returns:
            與輸入等長的序列，無法對應的欄位為 None
        """
        return [self.resolve_one(header) for header in raw_headers]


default_header_resolver = HeaderResolver()


def resolve_headers(raw_headers: Sequence[str]) -> List[Optional[CanonicalField]]:
    """使用預設同義詞表對應標題"""
    return default_header_resolver.resolve(raw_headers)
