# tests/test_api.py

from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import mimeburst.api.app as app_module
from mimeburst.api.app import app

from conftest import GMAIL_BOUNDARY

client = TestClient(app)


@pytest.fixture(autouse=True)
def _output_in_tmp(monkeypatch, tmp_path):
    monkeypatch.setattr(app_module, "CONFIG", replace(app_module.CONFIG, OUTPUT_DIR=str(tmp_path)))


def test_explode_gmail_upload(gmail_message):
    files = {"file": ("gmail_hi.eml", gmail_message, "message/rfc822")}
    resp = client.post("/explode", files=files)

    assert resp.status_code == 200
    body = resp.json()

    assert body["headers"]["Subject"] == "café test"
    assert body["summary"]["files_written"] == 2
    assert body["summary"]["parts_failed"] == 0
    assert [e["kind"] for e in body["events"]] == ["part_written", "part_written"]

    out_dir = Path(body["output_dir"])
    assert (out_dir / f"{GMAIL_BOUNDARY}-1.txt").read_bytes() == b"*hi!*"
    assert (out_dir / f"{GMAIL_BOUNDARY}-2.html").read_bytes() == b"<p><b>hi!</b></p>"


def test_not_multipart_is_rejected():
    raw = b"Subject: plain\r\nContent-Type: text/plain\r\n\r\nhello\r\n"
    files = {"file": ("plain.eml", raw, "message/rfc822")}
    resp = client.post("/explode", files=files)

    assert resp.status_code == 422
    assert resp.json()["error"] == "unclassifiable_message"


def test_home():
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
