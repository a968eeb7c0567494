"""
HTTP Transport

Issues requests against the system under test with aiohttp and returns
``Response`` values. Non-2xx answers raise ``TransportError`` carrying the
response; connection-level failures propagate as ``aiohttp.ClientError``.
Response headers keep aiohttp's case-insensitive multidict, so repeated
headers such as ``Set-Cookie`` survive.
"""

import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from .config import get_config
from .errors import TransportError
from .models import Response

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Transport:
    """
    Thin aiohttp wrapper used by request pipelines.

    Example:
        transport = Transport(timeout=10, headers={"Accept": "application/json"})
        response = await transport.send("GET", "http://localhost:8080/users")
    """

    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT, headers: Dict[str, str] = None):
        self.timeout = timeout
        self.default_headers = headers or {}

    async def send(
        self,
        method: Optional[str],
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Response:
        """
        Send one request.

        Dict and list bodies are sent as JSON, anything else as raw data.

        Raises:
            TransportError: The server answered with a non-2xx status
            aiohttp.ClientError: No response was received
        """
        method = (method or "GET").upper()
        kwargs: Dict[str, Any] = {}
        if body is not None:
            if isinstance(body, (dict, list)):
                kwargs["json"] = body
            else:
                kwargs["data"] = body

        merged_headers = {**self.default_headers, **(headers or {})}
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        logger.debug(f"{method} {url}")
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method, url, headers=merged_headers, params=params, **kwargs
            ) as resp:
                response = Response(
                    data=await _read_body(resp),
                    status=resp.status,
                    headers=resp.headers.copy(),
                    url=str(resp.url),
                    method=method,
                )

        logger.debug(f"{method} {url} -> {response.status}")
        if not response.ok:
            raise TransportError(
                f"Request failed with status code {response.status}", response=response
            )
        return response


async def _read_body(resp: aiohttp.ClientResponse) -> Any:
    """
    Decode a response body.

    JSON bodies are parsed and text is returned as ``str``. Bodies that are
    neither text nor JSON and do not decode are kept as raw ``bytes``.
    """
    raw = await resp.read()
    if not raw:
        return ""

    content_type = resp.content_type or ""
    textual = content_type.startswith("text/") or "json" in content_type

    try:
        text = raw.decode(resp.charset or "utf-8")
    except (UnicodeDecodeError, LookupError):
        if not textual:
            return raw
        text = raw.decode("utf-8", errors="replace")

    if "json" in content_type:
        try:
            return json.loads(text)
        except ValueError:
            logger.debug(f"Body of {resp.url} is not valid JSON, keeping text")
    return text


def default_transport() -> Transport:
    """Transport configured from the ``transport`` config section."""
    config = get_config()
    return Transport(
        timeout=config.get("transport.timeout", DEFAULT_TIMEOUT),
        headers=config.get("transport.headers") or {},
    )
