"""
Request Pipeline

Builds reusable request operations: given a context they derive request
parameters, obtain a response (mocked or real) and wrap it in a Resource.

    get_user = build_request(
        lambda ctx: {"method": "GET", "url": f"{ctx['base_url']}/users/{ctx['suite']}"},
        capture={"name": "data.name"},
    )
    resource = await get_user({"base_url": "http://localhost:8080", "suite": 1})
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Type, Union

from .capture import CaptureSpec, capture_data
from .errors import TransportError
from .models import Response
from .resource import Resource
from .transport import Transport, default_transport

logger = logging.getLogger(__name__)

ParamsSource = Union[Mapping[str, Any], Callable[[Dict[str, Any]], Mapping[str, Any]]]


class Request:
    """
    Request operation returned by ``build_request``.

    Calling it with a context returns a fresh ``resource_cls`` instance
    holding the response and the captured data.
    """

    def __init__(
        self,
        get_params: ParamsSource,
        mock: Any = None,
        capture: CaptureSpec = None,
        resource: Type[Resource] = Resource,
        transport: Optional[Transport] = None,
    ):
        self.get_params = get_params
        self.mock = mock
        self.capture = capture
        self.resource_cls = resource
        self.transport = transport

    def params(self, context: Dict[str, Any]) -> Mapping[str, Any]:
        if callable(self.get_params):
            return self.get_params(context)
        return self.get_params

    async def __call__(self, context: Optional[Dict[str, Any]] = None) -> Resource:
        context = {} if context is None else context
        params = self.params(context)

        if self.mock is not None:
            res = mock_request(params, self.mock)
        else:
            res = await real_request(params, self.transport or default_transport())

        resource = self.resource_cls()
        resource.res = res
        resource.captured_data = capture_data(self.capture, res)
        return resource

    def __repr__(self) -> str:
        kind = "mock" if self.mock is not None else "real"
        return f"Request({kind}, resource={self.resource_cls.__name__})"


def build_request(
    get_params: ParamsSource,
    mock: Any = None,
    capture: CaptureSpec = None,
    resource: Type[Resource] = Resource,
    transport: Optional[Transport] = None,
) -> Request:
    """
    Build a request operation.

    Args:
        get_params: Mapping or ``fn(context)`` returning method, url, headers,
            params (query) and body
        mock: Payload returned as response data without any network call
        capture: Capture spec applied to the response
        resource: Resource class instantiated per call
        transport: Transport for real requests (configured default if None)
    """
    return Request(get_params, mock=mock, capture=capture, resource=resource, transport=transport)


def mock_request(params: Mapping[str, Any], mock: Any) -> Response:
    """Synthetic response carrying ``mock`` as its data."""
    return Response(data=mock)


async def real_request(params: Mapping[str, Any], transport: Transport) -> Response:
    """
    Send the request; HTTP error responses are returned, not raised.

    Raises:
        TransportError: The failure carried no response
        aiohttp.ClientError: No response was received
    """
    try:
        return await transport.send(
            params.get("method"),
            params["url"],
            headers=params.get("headers"),
            params=params.get("params"),
            body=params.get("body"),
        )
    except TransportError as e:
        if e.response is None:
            raise
        logger.debug(f"Using error response: {e}")
        return e.response
