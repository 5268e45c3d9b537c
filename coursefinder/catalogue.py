"""
Catalogue snapshot acquisition.

The search engine only ever sees a plain list of session dicts. This module
produces that list either from the live JSON endpoint or from a JSON file
saved earlier (handy for tests and offline use).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

import requests

from coursefinder import config

logger = logging.getLogger(__name__)


class CatalogueError(RuntimeError):
    """The catalogue endpoint could not deliver a usable JSON payload."""


def _session_rows(data: Any) -> List[dict[str, Any]]:
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def fetch_catalogue(endpoint: str, timeout: float = config.TIMEOUT) -> List[dict[str, Any]]:
    """
    GET the catalogue JSON from `endpoint`.

    Raises CatalogueError for transport failures, non-2xx responses,
    non-JSON content types and undecodable bodies.
    """
    logger.info("fetching catalogue from %s", endpoint)
    try:
        resp = requests.get(endpoint, headers={"Accept": "application/json"}, timeout=timeout)
    except requests.RequestException as exc:
        raise CatalogueError(f"Catalogue fetch failed: {exc}") from exc

    body = resp.text
    if not resp.ok:
        raise CatalogueError(f"Catalogue fetch failed: {resp.status_code}\n{body[:500]}")

    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise CatalogueError(f"Catalogue responded non-JSON (CT={content_type}): {body[:200]}")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise CatalogueError(f"Failed to parse catalogue JSON: {exc}\n{body[:200]}") from exc

    rows = _session_rows(data)
    logger.info("catalogue holds %d sessions", len(rows))
    return rows


def load_catalogue(path: str | Path) -> List[dict[str, Any]]:
    """
    Load a catalogue snapshot from a JSON file.

    Never raises for a missing or broken file; returns [] instead so the
    caller still gets a (empty) search.
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("catalogue file not found: %s", p)
        return []
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("could not read catalogue file %s: %s", p, exc)
        return []
    return _session_rows(data)
