# tests/conftest.py

import sys
from pathlib import Path
from typing import List, Sequence, Tuple

import pytest

# Add the project root to sys.path so `import mimeburst` works
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

DATA_DIR = Path(__file__).resolve().parent / "data"

GMAIL_BOUNDARY = "bcaec520ea5d6918e204a8cea3b4"


def _multipart(
    boundary: str,
    parts: Sequence[Tuple[List[str], bytes]],
    preamble: bytes = b"",
    epilogue: bytes = b"",
    terminate: bool = True,
    eol: bytes = b"\r\n",
) -> bytes:
    """
    Assemble a multipart body. Each part is (header lines, body bytes);
    the body is written exactly, the delimiter owns the line break before it.
    """
    dash = b"--" + boundary.encode()
    out = [preamble]
    for headers, body in parts:
        out.append(dash + eol)
        for h in headers:
            out.append(h.encode() + eol)
        out.append(eol)
        out.append(body + eol)
    if terminate:
        out.append(dash + b"--" + eol)
        out.append(epilogue)
    return b"".join(out)


@pytest.fixture
def build_multipart():
    return _multipart


@pytest.fixture
def gmail_message() -> bytes:
    return (DATA_DIR / "gmail_hi.eml").read_bytes()


@pytest.fixture
def out_dir(tmp_path) -> Path:
    d = tmp_path / "parts"
    d.mkdir()
    return d
