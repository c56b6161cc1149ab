from urllib.parse import unquote

from fastapi.testclient import TestClient
from csvclean.main import app

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_validate_reports_and_repairs():
    r = client.post("/validate", json={"text": "a,b,c\n1,2,3,4"})
    assert r.status_code == 200

    data = r.json()
    assert data["is_not_csv"] is False
    assert data["expected_column_count"] == 3
    assert data["repaired_text"] == 'a,b,c\r\n1,2,"3, 4"'
    assert data["issues"][0]["kind"] == "column_mismatch"
    assert data["issues"][0]["actual_count"] == 4
    assert data["stats"] == {"rows": 2, "columns": 3}

def test_validate_line():
    r = client.post("/validate/line", json={"line": "1,2", "line_number": 3, "expected_column_count": 3})
    assert r.status_code == 200
    assert r.json()["issue"]["kind"] == "column_mismatch"

    r = client.post("/validate/line", json={"line": "1,2,3", "line_number": 3, "expected_column_count": 3})
    assert r.json() == {"issue": None}

def test_preview():
    r = client.post("/preview", json={"text": "h1,h2\n1,2\n3,4", "max_rows": 2})
    assert r.status_code == 200
    assert r.json() == {
        "stats": {"rows": 3, "columns": 2},
        "rows": [["h1", "h2"], ["1", "2"]],
        "cells": [["h1", "h2"], ["1", "2"]],
    }

def test_preview_cells_are_truncated_for_display():
    long_value = "x" * 40
    r = client.post("/preview", json={"text": f"name,notes\nAnn,{long_value}"})
    assert r.status_code == 200

    data = r.json()
    assert data["rows"][1] == ["Ann", long_value]
    assert data["cells"][1] == ["Ann", "x" * 30 + "..."]

def test_cleanup_does_not_gate():
    r = client.post("/cleanup", json={"text": "a,b\n\n1,2,3", "options": {"remove_empty_rows": True}})
    assert r.status_code == 200
    assert r.json() == {"text": "a,b\r\n1,2,3"}

def test_export_with_bom_and_cleanup():
    payload = {
        "text": "name,city\n Paul ,Montréal\n\n",
        "filename": "cities. ",
        "options": {"trim_whitespace": True, "remove_empty_rows": True},
        "add_bom": True,
    }
    r = client.post("/export", json=payload)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="cities.csv"' in r.headers["content-disposition"]

    # UTF-8 BOM bytes
    assert r.content.startswith(b"\xef\xbb\xbf")
    assert r.content.decode("utf-8-sig") == "name,city\r\nPaul,Montréal"

def test_export_non_latin1_filename():
    r = client.post("/export", json={"text": "a,b\n1,2", "filename": "数据"})
    assert r.status_code == 200

    disposition = r.headers["content-disposition"]
    assert 'filename="__.csv"' in disposition
    encoded = disposition.split("filename*=UTF-8''", 1)[1]
    assert unquote(encoded) == "数据.csv"

def test_export_blocked_while_issues_exist():
    r = client.post("/export", json={"text": "a,b,c\n1,2"})
    assert r.status_code == 422
    detail = r.json()["detail"]
    assert detail["issues"][0]["line"] == 2

def test_upload_decodes_latin1():
    # Include a Latin-1 character to force non-ASCII handling
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")

    files = {"file": ("cities.txt", raw, "text/csv")}
    r = client.post("/upload", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["filename"] == "cities.txt.csv"
    assert "Montréal" in data["text"]
    assert data["validation"]["issues"] == []

def test_upload_strips_bom():
    raw = "\ufeffa,b\n1,2\n".encode("utf-8")
    r = client.post("/upload", files={"file": ("data.csv", raw, "text/csv")})
    assert r.status_code == 200
    assert r.json()["text"] == "a,b\n1,2\n"

def test_upload_rejects_empty_file():
    r = client.post("/upload", files={"file": ("empty.csv", b"", "text/csv")})
    assert r.status_code == 422
