"""HTTP client for the ClickUp REST API.

One ``ClickUpClient`` is created by the process entry point and shared by
every resource service. It owns a single ``httpx.AsyncClient``; concurrent
tool calls reuse it without coordination because each request is a
self-contained exchange.

ClickUp API documentation: https://clickup.com/api/

Example usage:
    client = ClickUpClient(api_key="pk_...", team_id="9012345")
    spaces = await client.get(f"/team/{client.team_id}/space")
    await client.aclose()
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.clickup.com/api"
DEFAULT_TIMEOUT = 30.0


class ClickUpServiceError(Exception):
    """Error returned by (or while talking to) the ClickUp API.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status returned by ClickUp, or None for transport
            failures
        endpoint: API path that was requested
        err_code: ClickUp's own error code (``ECODE`` field), when present
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        endpoint: str = "",
        err_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        self.err_code = err_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_code": self.status_code,
            "endpoint": self.endpoint,
            "err_code": self.err_code,
        }


class ClickUpClient:
    """Authenticated async client for the ClickUp v2 and v3 APIs.

    Requests are not retried: a failed call surfaces immediately as a
    ``ClickUpServiceError``.
    """

    def __init__(
        self,
        api_key: str,
        team_id: str = "",
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.team_id = team_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": api_key},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ClickUpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Any] = None,
        json: Optional[Any] = None,
        files: Optional[Any] = None,
        data: Optional[Dict[str, Any]] = None,
        version: str = "v2",
    ) -> Any:
        """Issue one API request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: API path below the version prefix, e.g. ``/task/abc``
            params: Query parameters (mapping or list of pairs for repeated keys)
            json: JSON request body
            files: Multipart file payload (attachments)
            data: Multipart form fields sent alongside ``files``
            version: "v2" (default) or "v3" (documents)

        Returns:
            Decoded JSON, or ``{"success": True}`` for empty (204) responses

        Raises:
            ClickUpServiceError: On any non-2xx status or transport failure
        """
        endpoint = f"/{version}{path}"
        logger.debug(f"ClickUp {method} {endpoint}")

        request_kwargs: Dict[str, Any] = {"params": params}
        if json is not None:
            request_kwargs["json"] = json
        if files is not None:
            request_kwargs["files"] = files
            request_kwargs["data"] = data

        try:
            response = await self._http.request(method, endpoint, **request_kwargs)
        except httpx.TimeoutException as e:
            raise ClickUpServiceError(
                f"Request to ClickUp timed out: {endpoint}", endpoint=endpoint
            ) from e
        except httpx.RequestError as e:
            raise ClickUpServiceError(
                f"Request to ClickUp failed: {e}", endpoint=endpoint
            ) from e

        if response.status_code >= 400:
            message, err_code = self._extract_error(response)
            raise ClickUpServiceError(
                f"ClickUp API error {response.status_code}: {message}",
                status_code=response.status_code,
                endpoint=endpoint,
                err_code=err_code,
            )

        if response.status_code == 204 or not response.content:
            return {"success": True}

        try:
            return response.json()
        except ValueError as e:
            raise ClickUpServiceError(
                "ClickUp returned a non-JSON response",
                status_code=response.status_code,
                endpoint=endpoint,
            ) from e

    async def download(self, url: str) -> Tuple[bytes, str]:
        """Fetch a remote file for upload as an attachment.

        Uses a separate client so the ClickUp token is never sent to a
        third-party host.

        Returns:
            (content, filename) where filename is the last URL path segment
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as http:
                response = await http.get(url)
        except httpx.RequestError as e:
            raise ClickUpServiceError(f"Failed to download {url}: {e}", endpoint=url) from e

        if response.status_code >= 400:
            raise ClickUpServiceError(
                f"Failed to download {url}: HTTP {response.status_code}",
                status_code=response.status_code,
                endpoint=url,
            )
        filename = response.url.path.rsplit("/", 1)[-1] or "attachment"
        return response.content, filename

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    @staticmethod
    def _extract_error(response: httpx.Response) -> Tuple[str, Optional[str]]:
        try:
            data = response.json()
        except ValueError:
            return (response.text[:200] or "Unknown error"), None
        if isinstance(data, dict):
            message = data.get("err") or data.get("error") or data.get("message")
            return str(message or response.text[:200]), data.get("ECODE")
        return response.text[:200], None


class BaseService:
    """Shared plumbing for the per-resource services."""

    def __init__(self, client: ClickUpClient):
        self.client = client

    @property
    def team_id(self) -> str:
        if not self.client.team_id:
            raise ClickUpServiceError(
                "CLICKUP_TEAM_ID is not configured; workspace-level calls need it"
            )
        return self.client.team_id
