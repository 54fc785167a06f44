"""CLI for verifying a provider signing key and its publisher's organization membership."""

from __future__ import annotations

import argparse
import json
import sys

from pydantic import ValidationError

from keyverify.core.config import ConfigurationError, Settings
from keyverify.core.logging import bind_logger, configure_logging
from keyverify.core.time import Deadline
from keyverify.services.files import ReportWriteError, safe_write_text
from keyverify.services.github import GithubClient
from keyverify.services.gpg import GpgKeyInspector
from keyverify.services.pipeline import VerificationRequest, run_verification
from keyverify.services.verification import Result

EXIT_OK = 0
EXIT_VERIFICATION_FAILED = 1
EXIT_SETUP_ERROR = 2

MIN_TIMEOUT_SECONDS = 0.1


def compute_exit_code(result: Result) -> int:
    """Map the aggregate outcome to a process exit code; warnings still pass."""
    return EXIT_VERIFICATION_FAILED if result.did_fail() else EXIT_OK


def render_evidence(result: Result) -> str:
    payload = result.to_payload().model_dump(mode="json")
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verify-gpg-key",
        description="Verify a GPG key and the publisher's GitHub organization membership.",
    )
    parser.add_argument("--key-file", required=True, help="Location of the GPG key to verify")
    parser.add_argument(
        "--username",
        required=True,
        help="Github username to verify the GPG key against",
    )
    parser.add_argument(
        "--org",
        required=True,
        help="Github organization name to verify the GPG key against",
    )
    parser.add_argument("--output", default="", help="Path to write the markdown report to")
    parser.add_argument(
        "--evidence-file",
        default="",
        help="Optional path to write the JSON report payload to",
    )
    parser.add_argument(
        "--timeout-seconds",
        type=float,
        default=None,
        help="Overall verification deadline (defaults to VERIFICATION_TIMEOUT_SECONDS)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"verify-gpg-key configuration error: {exc}", file=sys.stderr)
        return EXIT_SETUP_ERROR

    logger = bind_logger(
        configure_logging(
            level=settings.log_level,
            log_format=settings.log_format,
            use_utc=settings.log_use_utc,
        ),
        github=args.username,
        org=args.org,
    )
    logger.debug("verify.init.key_location", extra={"location": args.key_file})

    try:
        token = settings.require_github_token()
    except ConfigurationError as exc:
        logger.error("verify.init.missing_token", extra={"error": str(exc)})
        return EXIT_SETUP_ERROR

    timeout_seconds = (
        settings.verification_timeout_seconds
        if args.timeout_seconds is None
        else max(MIN_TIMEOUT_SECONDS, float(args.timeout_seconds))
    )
    deadline = Deadline(seconds=timeout_seconds)
    result = run_verification(
        VerificationRequest(key_file=args.key_file, username=args.username, org_name=args.org),
        inspector=GpgKeyInspector(gpg_binary=settings.gpg_binary, deadline=deadline, logger=logger),
        github_client=GithubClient(
            token=token,
            base_url=settings.github_api_url,
            deadline=deadline,
            logger=logger,
        ),
        logger=logger,
    )

    report = result.render_markdown()
    print(report, end="")

    try:
        if args.output:
            safe_write_text(args.output, report)
        if args.evidence_file:
            safe_write_text(args.evidence_file, render_evidence(result))
    except ReportWriteError as exc:
        logger.error("verify.report.write_failed", extra={"error": str(exc)})
        return EXIT_SETUP_ERROR

    return compute_exit_code(result)


if __name__ == "__main__":
    raise SystemExit(main())
