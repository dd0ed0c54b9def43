"""
Global configuration values for the MIME exploder.
"""

import os
import sys
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ExplodeConfig:
    # Deepest multipart nesting we are willing to enter (top-level body = 1)
    MAX_DEPTH: int = int(os.getenv("MIMEBURST_MAX_DEPTH", "50"))

    # Permissions of every written part (rw-r--r--)
    FILE_MODE: int = int(os.getenv("MIMEBURST_FILE_MODE", "644"), 8)

    OUTPUT_DIR: str = os.getenv("MIMEBURST_OUTPUT_DIR", ".")
    LOG_DIR: str = os.getenv("MIMEBURST_LOG_DIR", "logs")
    LOG_LEVEL: str = os.getenv("MIMEBURST_LOG_LEVEL", "INFO").upper()

    # multipart/* without a boundary: write it out as an opaque leaf,
    # or report it as a failed part
    DOWNGRADE_BOUNDARYLESS_MULTIPART: bool = _env_bool(
        "MIMEBURST_DOWNGRADE_BOUNDARYLESS_MULTIPART", "true"
    )


CONFIG = ExplodeConfig()


def depth_ceiling() -> int:
    """
    Deepest nesting the interpreter's recursion limit leaves room for.
    Each level holds a few frames while the levels below it are walked.
    """
    return max(1, (sys.getrecursionlimit() - 100) // 3)
