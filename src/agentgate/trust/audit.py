"""Append-only audit trail for high-risk auto-approvals."""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

AUTO_APPROVED_TAG = "HIGH RISK AUTO-APPROVED (A4)"
AUTO_APPROVED_PREFIX_TAG = "HIGH RISK AUTO-APPROVED (A4 prefix)"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


def format_audit_line(tag: str, matched: str, command: str, *, timestamp: str = "") -> str:
    """Render one audit line; line breaks in *command* are escaped, all other text is kept."""
    flat = command.replace("\r", "\\r").replace("\n", "\\n")
    return f"[{timestamp or _now_iso()}] {tag}: {matched} - {flat}\n"


def append_audit_line(path: Path, tag: str, matched: str, command: str) -> str:
    """Append one line to *path* with a single O_APPEND write and return it."""
    line = format_audit_line(tag, matched, command)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
    try:
        os.write(fd, line.encode("utf-8"))
    finally:
        os.close(fd)
    logger.info("audit line appended to %s", path)
    return line
