import io
import sys

import pytest

import mimeburst.cli as cli

from conftest import GMAIL_BOUNDARY


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)


def test_message_file(gmail_message, tmp_path, out_dir, capsys):
    eml = tmp_path / "gmail_hi.eml"
    eml.write_bytes(gmail_message)

    code = cli.main([str(eml), "--out", str(out_dir)])

    assert code == cli.EXIT_OK
    printed = capsys.readouterr().out
    assert "Subject: café test" in printed
    assert "2 file(s) written, 0 part(s) failed" in printed
    assert (out_dir / f"{GMAIL_BOUNDARY}-1.txt").read_bytes() == b"*hi!*"


def test_message_from_stdin(gmail_message, out_dir, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(gmail_message)))

    assert cli.main(["--out", str(out_dir)]) == cli.EXIT_OK
    assert len(list(out_dir.iterdir())) == 2


def test_not_multipart_exit_code(tmp_path, out_dir, capsys):
    eml = tmp_path / "plain.eml"
    eml.write_bytes(b"Content-Type: text/plain\r\n\r\nhello\r\n")

    assert cli.main([str(eml), "--out", str(out_dir)]) == cli.EXIT_FATAL
    assert "not a multipart" in capsys.readouterr().err
    assert list(out_dir.iterdir()) == []


def test_partial_failure_exit_code(tmp_path, out_dir):
    eml = tmp_path / "broken.eml"
    eml.write_bytes(
        b"Content-Type: multipart/mixed; boundary=b\r\n\r\n"
        b"--b\r\nContent-Type: text/plain\r\n\r\nfine\r\n"
        b"--b\r\nContent-Transfer-Encoding: base64\r\n\r\n%%%\r\n"
        b"--b--\r\n"
    )

    assert cli.main([str(eml), "--out", str(out_dir)]) == cli.EXIT_PARTIAL
    assert [p.name for p in out_dir.iterdir()] == ["b-1.txt"]


def test_strict_multipart_flag(tmp_path, out_dir):
    eml = tmp_path / "nested.eml"
    eml.write_bytes(
        b"Content-Type: multipart/mixed; boundary=b\r\n\r\n"
        b"--b\r\nContent-Type: multipart/related\r\n\r\nopaque\r\n"
        b"--b--\r\n"
    )

    assert cli.main([str(eml), "--out", str(out_dir)]) == cli.EXIT_OK
    assert cli.main([str(eml), "--out", str(tmp_path / "strict"), "--strict-multipart"]) == cli.EXIT_PARTIAL


def test_missing_file(tmp_path, out_dir):
    assert cli.main([str(tmp_path / "nope.eml"), "--out", str(out_dir)]) == cli.EXIT_FATAL


def test_max_depth_beyond_recursion_limit_is_rejected(gmail_message, tmp_path, out_dir, capsys):
    eml = tmp_path / "gmail_hi.eml"
    eml.write_bytes(gmail_message)

    code = cli.main([str(eml), "--out", str(out_dir), "--max-depth", str(sys.getrecursionlimit())])

    assert code == cli.EXIT_FATAL
    assert "--max-depth" in capsys.readouterr().err
    assert list(out_dir.iterdir()) == []
