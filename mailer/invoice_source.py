"""Run the numbers-parser export and read the invoice record it writes."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional

from .errors import DataError, SubprocessError

logger = logging.getLogger(__name__)


def parser_command(
    executable: str, invoice_id: str, close: bool = False, return_to: Optional[str] = None
) -> list[str]:
    cmd = [
        executable,
        "--close",
        "true" if close else "false",
        "--adjust-before-exporting",
        "--value",
        invoice_id,
    ]
    if return_to:
        cmd += ["--return-to", return_to]
    return cmd


def run_numbers_parser(
    executable: str, invoice_id: str, close: bool = False, return_to: Optional[str] = None
) -> str:
    """Execute the parser and return its stdout; a non-zero exit raises."""
    cmd = parser_command(executable, invoice_id, close=close, return_to=return_to)
    logger.info("Running %s for invoice %s", executable, invoice_id)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise SubprocessError(f"Could not start {executable}: {exc}", returncode=-1, stderr=str(exc)) from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.error("%s exited with %s: %s", executable, result.returncode, stderr)
        raise SubprocessError(
            f"{executable} failed with exit code {result.returncode}: {stderr}",
            returncode=result.returncode,
            stderr=stderr,
        )

    logger.debug("%s output:\n%s", executable, result.stdout)
    return result.stdout


def read_invoice_data(path: Path) -> dict[str, str]:
    """Load the ``Invoices`` object from the parser's JSON export."""
    if not path.exists():
        raise DataError(f"Parsed invoice JSON not found: {path}")

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise DataError(f"Could not read invoice JSON {path}: {exc}") from exc

    invoices = document.get("Invoices") if isinstance(document, dict) else None
    if not isinstance(invoices, dict) or not all(isinstance(value, str) for value in invoices.values()):
        raise DataError(f"Invalid JSON structure in {path}: expected an 'Invoices' object of strings")

    logger.info("Loaded invoice %s", invoices.get("invoice_id", "<unknown>"))
    return invoices
