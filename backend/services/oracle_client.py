"""HTTP client for the remote ranking oracle (match, usage, preferences).

Transport and HTTP failures come back as ``Err`` values; only a successful
response whose body cannot be decoded raises.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from config import settings
from models.result import Err, ErrorCode, Ok, Result
from models.session import SessionContext

logger = logging.getLogger(__name__)


class MalformedResponseError(ValueError):
    """The oracle answered successfully with a body we cannot use."""


class OracleClient:
    def __init__(
        self,
        context: SessionContext,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.context = context
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.oracle_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_s,
            headers=context.headers(),
            transport=transport,
        )

    async def match(self, payload: dict[str, Any]) -> Result[Any]:
        return await self._request("POST", settings.match_path, json=payload)

    async def usage(self, feature: str) -> Result[Any]:
        path = settings.usage_path.format(feature=quote(feature, safe=""))
        return await self._request("GET", path)

    async def get_preferences(self) -> Result[Any]:
        return await self._request("GET", settings.preferences_path)

    async def save_preferences(self, weights: dict[str, float]) -> Result[Any]:
        return await self._request("POST", settings.preferences_path, json=weights)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Result[Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Oracle %s %s failed: %s", method, path, e)
            return Err(ErrorCode.TRANSIENT, message=str(e) or None)

        if response.is_error:
            return _error_from_response(response)

        try:
            return Ok(response.json())
        except ValueError as e:
            raise MalformedResponseError(
                f"{method} {path} returned a non-JSON body (status {response.status_code})"
            ) from e


def _error_from_response(response: httpx.Response) -> Err:
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    raw_code = body.get("code")
    if raw_code is None or raw_code == "UNKNOWN":
        code = ErrorCode.TRANSIENT if response.status_code >= 500 else ErrorCode.UNKNOWN
    else:
        code = ErrorCode.from_wire(raw_code)

    message = body.get("error") or body.get("message")
    return Err(code, message=message, status=response.status_code)
