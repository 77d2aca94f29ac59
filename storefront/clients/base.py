"""
Shared plumbing for the backend service clients.

Every client wraps one `httpx.Client` bound to its service's base URL and turns
each domain operation into a single REST call. Transport failures become
`ServiceUnavailable`; non-2xx answers become the `ServiceError` subclass for the
status code, carrying whatever detail the service put in the body.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.core.errors import ServiceUnavailable, error_for_status

logger = logging.getLogger(__name__)


def extract_error_detail(response: httpx.Response) -> str:
    """
    Best-effort human-readable message from an error response. The Go services
    answer with plain text; JSON bodies with "detail", "error" or "message" are
    handled too.
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text or ""
        return text.strip()[:300]

    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            value = body.get(key)
            if isinstance(value, str):
                return value
            if isinstance(value, list):
                return " | ".join(str(v.get("msg", v)) if isinstance(v, dict) else str(v) for v in value)
            if isinstance(value, dict):
                return " | ".join(f"{k}: {v}" for k, v in value.items())
    if isinstance(body, str):
        return body
    return str(body)[:300]


class ServiceClient:
    service = "backend"

    def __init__(self, base_url: str, http: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self.http = http if http is not None else httpx.Client(base_url=self.base_url)

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            response = self.http.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("%s %s%s failed: %s", method, self.service, path, exc)
            raise ServiceUnavailable(self.service, str(exc)) from exc

        if response.status_code >= 400:
            detail = extract_error_detail(response)
            logger.info("%s %s%s -> %s %s", method, self.service, path, response.status_code, detail)
            raise error_for_status(self.service, response.status_code, detail)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _get_list(self, path: str, **kwargs) -> list:
        # list endpoints may answer null (Go nil slice) or omit the body
        data = self._request("GET", path, **kwargs)
        return data if isinstance(data, list) else []

    def close(self) -> None:
        if self._owns_http:
            self.http.close()
