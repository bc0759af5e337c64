"""CSV 標題對應測試"""

import pytest
from src.vcardqr.core.models.contact import CanonicalField
from src.vcardqr.core.utils.header_resolver import HeaderResolver, resolve_headers, DEFAULT_SYNONYMS


class TestHeaderResolver:
    """標題對應測試"""

    @pytest.mark.parametrize("raw", [" Email ", "EMAIL", "e-mail", "Mail"])
    def test_email_variants(self, raw):
        """大小寫與前後空白不影響對應"""
        assert resolve_headers([raw]) == [CanonicalField.EMAIL]

    def test_full_header_row(self):
        """測試完整標題列"""
        headers = ["Contact ID", "Full Name", "Mobile", "E-Mail", "Company", "Job Title"]
        assert resolve_headers(headers) == [
            CanonicalField.ID,
            CanonicalField.NAME,
            CanonicalField.PHONE,
            CanonicalField.EMAIL,
            CanonicalField.ORGANIZATION,
            CanonicalField.TITLE,
        ]

    def test_unknown_headers_unmapped(self):
        """未知欄位對應為 None，且保持位置"""
        result = resolve_headers(["Name", "Notes", "phone number", "Tel"])
        assert result == [CanonicalField.NAME, None, None, CanonicalField.PHONE]

    def test_no_fuzzy_matching(self):
        """不做模糊比對"""
        assert resolve_headers(["emails", "nam", "first name"]) == [None, None, None]

    def test_empty_header(self):
        assert resolve_headers([""]) == [None]

    def test_ambiguous_synonym_is_unmapped(self):
        """同義詞出現在兩個欄位時視為未對應"""
        table = dict(DEFAULT_SYNONYMS)
        table[CanonicalField.TITLE] = frozenset({"title", "org"})
        resolver = HeaderResolver(table)

        assert resolver.resolve(["org", "company", "title"]) == [
            None,
            CanonicalField.ORGANIZATION,
            CanonicalField.TITLE,
        ]
        assert "org" in resolver.ambiguous

    def test_custom_table_normalized(self):
        """自訂同義詞表同樣不分大小寫"""
        resolver = HeaderResolver({CanonicalField.NAME: ["Nombre"]})
        assert resolver.resolve(["NOMBRE", "name"]) == [CanonicalField.NAME, None]
