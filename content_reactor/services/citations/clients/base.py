"""Base class for bibliographic HTTP clients."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from .... import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("services.citations.clients")


class BaseCitationClient:
    """Shared session handling for citation lookups.

    Lookups never raise on network or protocol errors. They return ``None``
    so the resolver can move on to the next source.
    """

    name: str = "base"

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 20.0,
        user_agent: Optional[str] = None,
    ) -> None:
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout_seconds
        self._user_agent = user_agent

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "BaseCitationClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(extra or {})
        if self._user_agent:
            headers.setdefault("User-Agent", self._user_agent)
        return headers

    def _request(
        self, method: str, url: str, *, headers: Optional[Dict[str, str]] = None, **kwargs: Any
    ) -> Optional[requests.Response]:
        """Send one request; ``None`` on transport errors or any non-200 status."""

        try:
            response = self._session.request(
                method, url, headers=self._headers(headers), timeout=self._timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.debug(
                "Citation lookup failed",
                extra={
                    "event": "citations.lookup_error",
                    "source": self.name,
                    "url": url,
                    "error": str(exc),
                },
            )
            return None
        if response.status_code != 200:
            logger.debug(
                "Citation lookup rejected",
                extra={
                    "event": "citations.lookup_rejected",
                    "source": self.name,
                    "url": url,
                    "http_status": response.status_code,
                },
            )
            return None
        return response

    def _get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[requests.Response]:
        return self._request("GET", url, params=params, headers=headers)

    def _post_json(
        self, url: str, *, data: Any, headers: Optional[Dict[str, str]] = None
    ) -> Optional[Any]:
        """POST ``data`` and decode the JSON reply, ``None`` if it is not JSON."""

        response = self._request("POST", url, data=data, headers=headers)
        if response is None:
            return None
        try:
            return response.json()
        except ValueError:
            return None


__all__ = ["BaseCitationClient"]
