"""
Fetching reading payloads.

The report endpoint serves a JSON object of ``timestamp -> reading`` and is
requested with no-cache headers so intermediaries never hand back an old
report. The ``Last-Modified`` header, when present, tells the scheduler when
the next upload is due.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import requests
from dateutil import parser as date_parser

from .core.config import NO_CACHE_HEADERS
from .core.exceptions import FetchFailed, MalformedPayload
from .core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FetchResult:
    payload: dict[str, Any]
    last_modified: Optional[int] = None


def parse_last_modified(value: Optional[str]) -> Optional[int]:
    """Parse an HTTP date (``Wed, 21 Oct 2015 07:28:00 GMT``) to epoch seconds.

    Returns None when the header is absent or unparseable.
    """
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Ignoring Last-Modified {value!r}: {e}")
        return None
    if parsed.tzinfo is None:
        logger.debug(f"Ignoring Last-Modified {value!r}: no zone")
        return None
    return int(parsed.timestamp())


def _check_payload(data: Any, origin: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedPayload(f"{origin} holds {type(data).__name__}, expected an object")
    return data


def fetch_payload(
    url: str,
    headers: Optional[dict[str, str]] = None,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
) -> FetchResult:
    """GET the reading payload.

    Args:
        url: Report URL
        headers: Request headers (defaults to the no-cache pair)
        timeout: Seconds before giving up
        session: Optional requests session to reuse connections

    Raises:
        FetchFailed: On transport errors or non-2xx responses
        MalformedPayload: If the body is not a JSON object
    """
    http = session or requests
    logger.info(f"Fetching readings from {url}")

    try:
        resp = http.get(url, headers=headers or dict(NO_CACHE_HEADERS), timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise FetchFailed(url, str(e), status_code=status) from e
    except requests.RequestException as e:
        raise FetchFailed(url, str(e)) from e

    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedPayload(f"response is not JSON: {e}") from e

    result = FetchResult(
        payload=_check_payload(data, url),
        last_modified=parse_last_modified(resp.headers.get("Last-Modified")),
    )
    logger.debug(f"Fetched {len(result.payload)} entries (Last-Modified: {result.last_modified})")
    return result


def load_payload_file(path: Union[Path, str]) -> FetchResult:
    """Read a payload saved to disk, for offline use.

    Raises:
        MalformedPayload: If the file is not a JSON object
        OSError: If the file cannot be read
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"{p} is not JSON: {e}") from e
    return FetchResult(payload=_check_payload(data, str(p)))
