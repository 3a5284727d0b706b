"""HTTP client with retries and backoff."""

from __future__ import annotations

import os
import time
from typing import Any, Mapping, Optional

import requests

from .errors import NametreeError
from .utils import logger, merge_dicts

DEFAULT_HEADERS = {
    "User-Agent": os.getenv("NAMETREE_USER_AGENT", "nametree/1.0 (+https://example.com/contact)"),
}
RETRY_STATUSES = {429, 500, 502, 503, 504}


class HTTPError(NametreeError):
    pass


class HTTPClient:
    def __init__(
        self,
        max_retries: int = 3,
        backoff: float = 0.5,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.max_retries = max_retries
        self.backoff = backoff
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        headers = merge_dicts(DEFAULT_HEADERS, dict(headers or {}))
        for attempt in range(self.max_retries):
            try:
                resp = self.session.request(method, url, params=params, headers=headers, timeout=self.timeout)
            except requests.RequestException as exc:
                raise HTTPError(f"Request to {url} failed: {exc}") from exc
            if resp.status_code in (200, 304):
                return resp
            if resp.status_code in RETRY_STATUSES:
                sleep_for = self.backoff * (2**attempt)
                logger.warning("HTTP %s returned %s, retrying in %.2fs", url, resp.status_code, sleep_for)
                time.sleep(sleep_for)
                continue
            raise HTTPError(f"Request failed with status {resp.status_code}: {resp.text[:200]}")
        raise HTTPError(f"Exceeded retries for {url}")

    def get_text(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        resp = self.request("GET", url, params=params, headers=headers)
        resp.encoding = resp.encoding or "utf-8"
        return resp.text


__all__ = ["HTTPClient", "HTTPError", "DEFAULT_HEADERS"]
