# tests/test_csv_parser.py
"""
Tests for csv_parser.py - lenient CSV reading and writing
"""
from coursemend.csv_parser import parse_csv, rows_to_records, write_csv


class TestParseCsv:
    """Tests for tokenizing CSV text"""

    def test_escaped_quotes_and_commas(self):
        """Doubled quotes unescape and quoted commas stay in the field"""
        rows = parse_csv('"say ""hi""","a,b"')
        assert rows == [['say "hi"', "a,b"]]

    def test_newline_inside_quotes(self):
        """A quoted field can span lines"""
        rows = parse_csv('id,content\nl1,"line one\nline two"\n')
        assert rows == [["id", "content"], ["l1", "line one\nline two"]]

    def test_crlf_is_one_terminator(self):
        """CRLF ends a row without leaving a blank row behind"""
        rows = parse_csv("a,b\r\nc,d\r\n")
        assert rows == [["a", "b"], ["c", "d"]]

    def test_lone_cr_ends_row(self):
        """A bare CR also ends a row"""
        rows = parse_csv("a,b\rc,d")
        assert rows == [["a", "b"], ["c", "d"]]

    def test_blank_rows_dropped(self):
        """Trailing and interior blank lines produce no rows"""
        rows = parse_csv("a,b\n\nc,d\n\n")
        assert rows == [["a", "b"], ["c", "d"]]

    def test_empty_fields_kept(self):
        """Empty fields inside a row are preserved"""
        rows = parse_csv("a,,c,\n")
        assert rows == [["a", "", "c", ""]]

    def test_unterminated_quote_flushed(self):
        """Input ending inside a quote keeps the partial field"""
        rows = parse_csv('a,"open\nstill open')
        assert rows == [["a", "open\nstill open"]]

    def test_bom_stripped(self):
        """A leading byte order mark does not end up in the first header"""
        rows = parse_csv("\ufeffid,unitId\nl1,u1")
        assert rows[0] == ["id", "unitId"]

    def test_empty_text(self):
        """Empty input has no rows"""
        assert parse_csv("") == []

    def test_large_quoted_field(self):
        """Fields past the csv module's default size limit still parse"""
        body = "經,\n" * 100_000
        rows = parse_csv('id,content\nl1,"' + body + '"\n')
        assert rows == [["id", "content"], ["l1", body]]


class TestRowsToRecords:
    """Tests for header-keyed records"""

    def test_short_rows_padded(self):
        """Cells missing from a short row read as empty strings"""
        headers, records = rows_to_records([["id", "name", "quizId"], ["l1", "One"]])
        assert headers == ["id", "name", "quizId"]
        assert records == [{"id": "l1", "name": "One", "quizId": ""}]

    def test_header_whitespace_trimmed(self):
        """Header names are matched without surrounding spaces"""
        _, records = rows_to_records([[" id ", "unitId"], ["l1", "u1"]])
        assert records[0]["id"] == "l1"

    def test_no_rows(self):
        """No rows gives no headers and no records"""
        assert rows_to_records([]) == ([], [])


class TestWriteCsv:
    """Tests for CSV output"""

    def test_minimal_quoting(self, tmp_path):
        """Only fields that need it are quoted"""
        path = tmp_path / "out" / "lessons.csv"
        write_csv(path, [["id", "content"], ["l1", 'a,b "c"'], ["l2", "plain"]])

        text = path.read_text(encoding="utf-8")
        assert text == 'id,content\nl1,"a,b ""c"""\nl2,plain\n'

    def test_written_file_parses_back(self, tmp_path):
        """Multi-line fields survive writing and parsing"""
        path = tmp_path / "lessons.csv"
        rows = [["id", "content"], ["l1", "### 讀經\n\n- [A](https://a.example)"]]
        write_csv(path, rows)

        assert parse_csv(path.read_text(encoding="utf-8")) == rows
