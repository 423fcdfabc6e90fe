"""
HTTP client the public pages use to fetch site content.

Any failure (network error, non-2xx status, unreadable body) yields a local
fallback copy so a page can still render. Requests are not retried.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from welfare_site.content import DEFAULT_ABOUT, DEFAULT_CONTACT, DEFAULT_HOME, DEFAULT_MEMBERS

logger = logging.getLogger(__name__)

FALLBACK_GALLERY = {"albums": [], "images": []}


@dataclass
class FetchResult:
    data: Any
    ok: bool = True
    error: Optional[str] = None


@dataclass
class ContentClient:
    """Fetches content from the site API rooted at `base_url`."""

    base_url: str
    api_prefix: str = "/api"
    timeout: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{self.api_prefix}{path}"

    def _get(self, path: str, fallback: Any) -> FetchResult:
        try:
            response = self.session.get(self._url(path), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Fetching %s failed: %s", path, e)
            return FetchResult(copy.deepcopy(fallback), ok=False, error=str(e))
        # A 5xx body may look like content; it is still a failure.
        if not response.ok:
            logger.warning("Fetching %s failed: HTTP %s", path, response.status_code)
            return FetchResult(
                copy.deepcopy(fallback),
                ok=False,
                error=f"HTTP {response.status_code}",
            )
        try:
            return FetchResult(response.json())
        except ValueError as e:
            logger.warning("Fetching %s returned invalid JSON", path)
            return FetchResult(copy.deepcopy(fallback), ok=False, error=str(e))

    def get_home(self) -> FetchResult:
        return self._get("/home", DEFAULT_HOME)

    def get_about(self) -> FetchResult:
        return self._get("/about", DEFAULT_ABOUT)

    def get_contact(self) -> FetchResult:
        return self._get("/contact", DEFAULT_CONTACT)

    def get_members(self) -> FetchResult:
        return self._get("/members", DEFAULT_MEMBERS)

    def get_gallery(self) -> FetchResult:
        return self._get("/gallery", FALLBACK_GALLERY)

    def submit_contact(self, name: str, email: str, message: str) -> FetchResult:
        """Post the contact form; the result carries the server message."""
        payload = {"name": name, "email": email, "message": message}
        try:
            response = self.session.post(
                self._url("/contact/submit"), json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("Contact form submit failed: %s", e)
            return FetchResult(None, ok=False, error=str(e))
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok:
            return FetchResult(
                body,
                ok=False,
                error=body.get("message") or f"HTTP {response.status_code}",
            )
        return FetchResult(body)
