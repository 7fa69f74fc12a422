"""Content negotiation: maps return values to Response objects.

isinstance-based dispatch on the handler's return value, no magic, fully
predictable.
"""

import dataclasses
import json as json_module
from typing import Any
from xml.etree import ElementTree

from hammock.data.model import Model
from hammock.http.response import Response

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"
HTML_CONTENT_TYPE = "text/html"


def _json_default(value: Any) -> Any:
    """Serialize the types ``json`` does not know about."""
    if isinstance(value, Model):
        return value.attributes
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def to_json(value: Any) -> str:
    """Pretty-printed JSON, keys in insertion order."""
    return json_module.dumps(value, indent=4, default=_json_default)


XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


def to_xml(value: ElementTree.Element | ElementTree.ElementTree) -> str:
    """Serialize an element or tree with an XML declaration."""
    root = value.getroot() if isinstance(value, ElementTree.ElementTree) else value
    # tostring() would declare the locale encoding; the body is always UTF-8.
    return XML_DECLARATION + ElementTree.tostring(root, encoding="unicode")


def negotiate(value: Any) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``              -> pass through
    2. ``None``                  -> 200, text/html, empty body
    3. ``str``                   -> 200, text/html
    4. ``Element`` / ``ElementTree`` -> 200, application/xml
    5. anything else             -> 200, application/json

    Raises ``TypeError`` if a value in step 5 cannot be serialized.
    """
    match value:
        case Response():
            return value
        case None:
            return Response(body="", content_type=HTML_CONTENT_TYPE)
        case str():
            return Response(body=value, content_type=HTML_CONTENT_TYPE)
        case ElementTree.Element() | ElementTree.ElementTree():
            return Response(body=to_xml(value), content_type=XML_CONTENT_TYPE)
        case Model():
            return Response(body=to_json(value.attributes), content_type=JSON_CONTENT_TYPE)
        case _:
            return Response(body=to_json(value), content_type=JSON_CONTENT_TYPE)
