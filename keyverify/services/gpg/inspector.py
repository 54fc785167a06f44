"""Inspect OpenPGP key material with a throwaway gpg home directory."""

from __future__ import annotations

import os
import subprocess
import tempfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from keyverify.core.logging import LoggerLike, get_logger
from keyverify.core.time import Deadline, DeadlineExceeded
from keyverify.services.gpg.colons import parse_colon_listing
from keyverify.services.gpg.errors import KeyParseError
from keyverify.services.gpg.models import SigningKey

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]

SHOW_KEYS_ARGS = (
    "--batch",
    "--no-tty",
    "--with-colons",
    "--fixed-list-mode",
    "--show-keys",
)


def run_command(
    args: Sequence[str],
    *,
    env: Mapping[str, str],
    timeout: float | None,
) -> subprocess.CompletedProcess[str]:
    """Run gpg and capture its text output."""
    return subprocess.run(
        list(args),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        env=dict(env),
        timeout=timeout,
        check=False,
    )


class GpgKeyInspector:
    """Parse raw key bytes into a ``SigningKey`` using ``gpg --show-keys``.

    Nothing is imported into the caller's keyring: every call uses a fresh
    ``GNUPGHOME`` that is removed afterwards.
    """

    def __init__(
        self,
        *,
        gpg_binary: str = "gpg",
        deadline: Deadline | None = None,
        logger: LoggerLike | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._gpg_binary = gpg_binary
        self._deadline = deadline
        self._logger = logger or get_logger(__name__)
        self._runner = runner or run_command

    def _timeout(self) -> float | None:
        if self._deadline is None:
            return None
        return self._deadline.timeout_for("key inspection")

    def parse(self, data: bytes) -> SigningKey:
        """Return the single key contained in ``data`` or raise ``KeyParseError``."""
        if not data.strip():
            raise KeyParseError("key material is empty")

        with tempfile.TemporaryDirectory(prefix="keyverify-gnupg-") as home:
            key_path = Path(home) / "candidate.key"
            key_path.write_bytes(data)
            env = {**os.environ, "GNUPGHOME": home}
            args = [self._gpg_binary, *SHOW_KEYS_ARGS, str(key_path)]
            try:
                completed = self._runner(args, env=env, timeout=self._timeout())
            except DeadlineExceeded as exc:
                raise KeyParseError(f"could not inspect key: {exc}") from exc
            except subprocess.TimeoutExpired as exc:
                raise KeyParseError(f"gpg timed out after {exc.timeout:g}s") from exc
            except FileNotFoundError as exc:
                raise KeyParseError(f"gpg executable not found: {self._gpg_binary}") from exc
            except OSError as exc:
                raise KeyParseError(f"could not run gpg executable {self._gpg_binary}: {exc}") from exc

        self._logger.debug(
            "verify.key.gpg_listing",
            extra={"returncode": completed.returncode, "stdout_bytes": len(completed.stdout or "")},
        )
        try:
            keys = parse_colon_listing(completed.stdout or "")
        except ValueError as exc:
            raise KeyParseError(f"unreadable gpg key listing: {exc}") from exc
        if not keys:
            detail = (completed.stderr or "").strip() or f"gpg exited with code {completed.returncode}"
            raise KeyParseError(f"no OpenPGP key found: {detail}")
        if len(keys) > 1:
            raise KeyParseError(f"the key contains too many entities ({len(keys)}), expected exactly one")
        return keys[0]
