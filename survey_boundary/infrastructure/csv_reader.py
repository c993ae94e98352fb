"""
Infrastructure layer: Decoding uploaded CSV exports into header-keyed rows.
"""
from typing import Any, Dict, List
import csv
import io
import logging

from survey_boundary.config import settings

logger = logging.getLogger(__name__)


SUPPORTED_DELIMITERS = ",;\t"
SNIFF_SAMPLE_SIZE = 4096


class UploadError(Exception):
    """Raised when an uploaded file cannot be turned into rows."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def decode_upload(content: bytes) -> str:
    """
    Decode raw upload bytes as text.

    UTF-8 (with or without BOM) is tried first, then Latin-1 as commonly
    written by older field software.

    Raises:
        UploadError: If the upload is empty or too large
    """
    if not content:
        raise UploadError("Uploaded file is empty")
    if len(content) > settings.max_upload_bytes:
        raise UploadError(
            f"Uploaded file exceeds {settings.max_upload_bytes} bytes",
            status_code=413,
        )

    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("Upload is not UTF-8, decoding as Latin-1")
        return content.decode("latin-1")


def detect_dialect(text: str):
    """Sniff the delimiter among comma, semicolon and tab, defaulting to comma."""
    try:
        return csv.Sniffer().sniff(text[:SNIFF_SAMPLE_SIZE], delimiters=SUPPORTED_DELIMITERS)
    except csv.Error:
        return csv.excel


def read_csv_rows(content: bytes) -> List[Dict[str, Any]]:
    """
    Parse a CSV-with-header upload into rows keyed by header.

    Args:
        content: Raw file bytes

    Returns:
        List of rows (header -> cell text); blank lines are skipped

    Raises:
        UploadError: If the file cannot be decoded or has no header
    """
    text = decode_upload(content)
    reader = csv.DictReader(io.StringIO(text), dialect=detect_dialect(text))

    if not reader.fieldnames:
        raise UploadError("CSV file has no header row", status_code=422)

    rows = []
    for row in reader:
        if not any((value or "").strip() for key, value in row.items() if key is not None):
            continue
        rows.append({key.strip(): value for key, value in row.items() if key is not None})

    logger.info(f"Read {len(rows)} rows with columns {reader.fieldnames}")
    return rows
