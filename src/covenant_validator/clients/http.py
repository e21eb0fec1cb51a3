# src/covenant_validator/clients/http.py
__all__ = ["ApiClient"]

import json
import logging
from typing import Any, Optional

import httpx

from covenant_validator.errors import CollaboratorError


logger = logging.getLogger(__name__)


def is_uint_string(value: str) -> bool:
    """ASCII decimal digits only; ``str.isdigit`` also accepts forms ``int`` rejects."""
    return value.isascii() and value.isdigit()


class ApiClient:
    """Shared HTTP session for every read-only collaborator.

    One ``httpx.Client`` is opened per validation run and closed when the
    run ends. Any transport failure, non-2xx status or undecodable body is
    raised as ``CollaboratorError``: a run that cannot observe ground truth
    must stop, so nothing here retries or returns a default.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout_seconds: HTTP request timeout
            user_agent: User-Agent header value
            transport: Optional transport override (tests use ``httpx.MockTransport``)
        """
        self.timeout = timeout_seconds
        self.user_agent = user_agent
        self._transport = transport
        self._http: Optional[httpx.Client] = None

    def __enter__(self) -> "ApiClient":
        """Open the HTTP session for context manager use."""
        self._ensure_open()
        return self

    def __exit__(self, *args) -> None:
        """Close the HTTP session."""
        self.close()

    def _ensure_open(self) -> httpx.Client:
        if self._http is None:
            headers = {"User-Agent": self.user_agent} if self.user_agent else None
            self._http = httpx.Client(
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    def get_text(self, url: str) -> str:
        """GET ``url`` and return the body as text."""
        http = self._ensure_open()
        try:
            response = http.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CollaboratorError(
                f"HTTP {e.response.status_code} from collaborator", url
            ) from e
        except httpx.RequestError as e:
            raise CollaboratorError(f"Request failed: {e}", url) from e
        logger.debug("GET %s -> %d (%d bytes)", url, response.status_code, len(response.content))
        return response.text

    def get_json(self, url: str) -> Any:
        """GET ``url`` and decode the JSON body."""
        text = self.get_text(url)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise CollaboratorError(f"Invalid JSON response: {e}", url) from e
