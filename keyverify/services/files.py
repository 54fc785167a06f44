"""Key loading and report persistence on the local filesystem."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from keyverify.services.gpg.errors import KeyLoadError


class ReportWriteError(RuntimeError):
    """The rendered report could not be persisted."""


def read_key_file(location: str | Path) -> bytes:
    """Read raw key material, reporting unreadable paths as ``KeyLoadError``."""
    try:
        return Path(location).read_bytes()
    except OSError as exc:
        raise KeyLoadError(f"failed to read key file: {exc}") from exc


def safe_write_text(path: str | Path, content: str) -> None:
    """Write ``content`` atomically: temp file in the target directory, then replace."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise ReportWriteError(f"failed to write report to {target}: {exc}") from exc
