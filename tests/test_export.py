import pytest

from csvclean.cleanup import CleanupOptions
from csvclean.export import (
    ExportBlockedError,
    content_disposition,
    decode_csv_bytes,
    encode_csv,
    ensure_csv_extension,
    export_csv,
)
from csvclean.validate import IssueKind


@pytest.mark.parametrize(
    "name, expected",
    [
        (None, "export.csv"),
        ("   ", "export.csv"),
        ("report", "report.csv"),
        ("Report.CSV", "Report.CSV"),
        ("data.txt", "data.txt.csv"),
        ("draft. . ", "draft.csv"),
        ("a/b:c?", "a-b-c-.csv"),
        ("...", "export.csv"),
    ],
)
def test_ensure_csv_extension(name, expected):
    assert ensure_csv_extension(name) == expected


def test_encode_csv_bom_is_optional():
    assert encode_csv("a,b") == b"a,b"
    assert encode_csv("a,b", add_bom=True) == b"\xef\xbb\xbfa,b"


def test_decode_csv_bytes_strips_bom():
    text, report = decode_csv_bytes(b"\xef\xbb\xbfa,b\r\n1,2")
    assert text == "a,b\r\n1,2"
    assert report["decode_fallback"] is False


def test_export_forces_crlf():
    exported = export_csv("a,b\n1,2\n", filename="out")
    assert exported.filename == "out.csv"
    assert exported.content == b"a,b\r\n1,2\r\n"
    assert len(exported.sha256) == 64


def test_export_applies_cleanup():
    exported = export_csv("a,b\n1,2\n\n1,2", options=CleanupOptions(remove_empty_rows=True, remove_duplicates=True))
    assert exported.content == b"a,b\r\n1,2"
    assert exported.filename == "export.csv"


def test_export_blocked_by_column_mismatch():
    with pytest.raises(ExportBlockedError) as excinfo:
        export_csv("a,b,c\n1,2,3,4")
    assert excinfo.value.result.issues[0].kind is IssueKind.COLUMN_MISMATCH


def test_export_blocked_for_non_csv_text():
    with pytest.raises(ExportBlockedError) as excinfo:
        export_csv("just some notes\nmore notes")
    assert excinfo.value.result.is_not_csv


def test_content_disposition_ascii_name():
    assert content_disposition("report.csv") == 'attachment; filename="report.csv"'


def test_content_disposition_non_ascii_name():
    value = content_disposition("données.csv")
    assert value == "attachment; filename=\"donn_es.csv\"; filename*=UTF-8''donn%C3%A9es.csv"
    value.encode("latin-1")
