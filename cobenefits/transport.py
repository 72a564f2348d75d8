"""Fetch the raw dataset text from a local path or an http(s) URL."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Union

import requests

from cobenefits.config import HTTP_TIMEOUT
from cobenefits.errors import LoadFailed

logger = logging.getLogger(__name__)

Source = Union[str, Path]


def is_url(source: Source) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def _fetch_url(url: str, timeout: float) -> str:
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    # decode the bytes ourselves: requests guesses ISO-8859-1 for text/csv without a charset
    return r.content.decode("utf-8-sig")


def _read_file(path: Path) -> str:
    return path.read_text(encoding="utf-8-sig")


def read_text(source: Source, timeout: float = HTTP_TIMEOUT) -> str:
    """Blocking read of ``source``; any failure becomes ``LoadFailed``."""
    try:
        if is_url(source):
            return _fetch_url(str(source), timeout)
        return _read_file(Path(source))
    except requests.RequestException as exc:
        raise LoadFailed(f"Failed to load CSV: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadFailed(f"Failed to load CSV: {exc}") from exc


async def load_text(source: Source, timeout: float = HTTP_TIMEOUT) -> str:
    """Read ``source`` off the event loop thread."""
    logger.info("Loading dataset from %s", source)
    return await asyncio.to_thread(read_text, source, timeout)
