"""CSV 處理流程測試"""

from unittest.mock import patch

from src.vcardqr.core.models.contact import CanonicalField, PipelineStatus
from src.vcardqr.core.services.csv_pipeline import CsvContactPipeline, parse_csv, split_lines
from src.vcardqr.core.exceptions import SerializationPreconditionError


class TestCsvContactPipeline:
    """CSV 轉聯絡人測試"""

    def setup_method(self):
        self.pipeline = CsvContactPipeline()

    def test_end_to_end(self, sample_csv):
        """空白列被略過，順序保持不變"""
        result = self.pipeline.run(sample_csv)

        assert result.status == PipelineStatus.OK
        assert len(result.contacts) == 2

        jane, bob = result.contacts
        assert jane.name == "Jane Doe"
        assert jane.id == "local-1"
        assert "N:Doe;Jane;;;" in jane.vcf_content.split("\n")
        assert "FN:Jane Doe" in jane.vcf_content.split("\n")

        assert bob.id == "local-3"
        assert "FN:Bob" in bob.vcf_content.split("\n")
        assert "N:;Bob;;;" in bob.vcf_content.split("\n")

        assert result.insufficient_rows == 1

    def test_synthetic_id_uses_source_line(self):
        """第 5 列沒有 ID 時指派 local-5"""
        csv_text = "ID,Name\nA1,One\nA2,Two\nA3,Three\nA4,Four\n,Five\n"
        contacts = parse_csv(csv_text)

        assert [c.id for c in contacts] == ["A1", "A2", "A3", "A4", "local-5"]

    def test_existing_id_kept(self):
        contacts = parse_csv("record id,name\nemp-7,Jane\n")
        assert contacts[0].id == "emp-7"

    def test_header_only(self):
        """只有標題列時回傳空結果而非錯誤"""
        result = self.pipeline.run("Name,Phone,Email\n")

        assert result.contacts == []
        assert result.status == PipelineStatus.EMPTY

    def test_empty_document(self):
        assert self.pipeline.run("").contacts == []
        assert self.pipeline.run("   \n\n  \n").contacts == []

    def test_malformed_row_skipped(self):
        """欄位數不符的列被略過，不會產生部分資料"""
        csv_text = "Name,Phone,Email\nJane,555,jane@x.com,extra\nBob,556,bob@x.com\n"
        result = self.pipeline.run(csv_text)

        assert [c.name for c in result.contacts] == ["Bob"]
        assert result.malformed_rows == 1

    def test_quoted_comma_is_delimiter(self):
        """不支援引號欄位：值中的逗號一律切分"""
        csv_text = 'Name,Email\n"Doe, Jane",jane@x.com\n'
        assert parse_csv(csv_text) == []

    def test_organization_and_title_only_excluded(self):
        csv_text = "Name,Company,Title\n,Acme,CTO\nJane,Acme,CEO\n"
        contacts = parse_csv(csv_text)

        assert len(contacts) == 1
        assert contacts[0].name == "Jane"

    def test_blank_lines_do_not_count(self):
        """空白列不計入列號"""
        csv_text = "\nName\n\n\nJane\n\nBob\n"
        assert [c.id for c in parse_csv(csv_text)] == ["local-1", "local-2"]

    def test_windows_line_endings(self):
        contacts = parse_csv("Name,Phone\r\nJane Doe,555\r\n")
        assert contacts[0].phone == "555"

    def test_control_separators_stay_in_cell(self):
        """儲存格內的換頁字元或行分隔字元不會拆成新列"""
        contacts = parse_csv("Name,Phone\nJane\x0cDoe,555\nAnn\u2028Lee,557\nBob,556\n")

        assert [(c.id, c.name, c.phone) for c in contacts] == [
            ("local-1", "Jane\x0cDoe", "555"),
            ("local-2", "Ann\u2028Lee", "557"),
            ("local-3", "Bob", "556"),
        ]

    def test_unmapped_columns_ignored(self):
        contacts = parse_csv("Name,Notes\nJane,likes tea\n")
        assert contacts[0].canonical_fields() == {
            CanonicalField.ID: "local-1",
            CanonicalField.NAME: "Jane",
        }

    def test_deterministic(self, sample_csv):
        assert self.pipeline.run(sample_csv) == self.pipeline.run(sample_csv)

    def test_row_failure_does_not_escape(self):
        """序列化失敗只略過該列"""
        with patch(
            "src.vcardqr.core.services.csv_pipeline.serialize_contact",
            side_effect=[SerializationPreconditionError(), "BEGIN:VCARD\nEND:VCARD"],
        ):
            result = self.pipeline.run("Name\nJane\nBob\n")

        assert [c.name for c in result.contacts] == ["Bob"]
        assert result.failed_rows == 1


def test_split_lines_drops_blank():
    assert split_lines("a\n \n\nb\n") == ["a", "b"]


def test_split_lines_only_on_newline():
    """其他 Unicode 分行字元屬於欄位內容"""
    assert split_lines("Name\nJane\x0cDoe\nA\u2028B\r\n") == ["Name", "Jane\x0cDoe", "A\u2028B\r"]
