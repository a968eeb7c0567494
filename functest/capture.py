"""
Response Capture

Extracts values from a response so later steps and assertions can use them.

A capture spec is either a callable ``fn(response)`` or a mapping of
names to dotted paths into the response:

    {"token": "data.auth.token", "location": "headers.Location"}
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .models import Response
from .utils import get_path

logger = logging.getLogger(__name__)

CaptureSpec = Union[None, Callable[[Response], Any], Mapping[str, Union[str, Callable]]]


def capture_data(spec: CaptureSpec, response: Optional[Response]) -> Dict[str, Any]:
    """Build the captured-data mapping for ``response``."""
    if spec is None or response is None:
        return {}

    if callable(spec):
        return spec(response)

    captured = {}
    for name, source in spec.items():
        if callable(source):
            captured[name] = source(response)
        else:
            captured[name] = get_path(response, source)
            if captured[name] is None:
                logger.debug(f"Capture '{name}': path '{source}' not found in response")
    return captured
