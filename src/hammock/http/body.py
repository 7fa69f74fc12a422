"""Request body parsing: URL-encoded, multipart, and JSON.

Produces the flat ``post_data`` / ``put_data`` mappings handlers and
resources consume. A field submitted once maps to its string value; a
field submitted several times maps to the list of values.

``python-multipart`` handles ``multipart/form-data``. URL-encoded forms
and JSON use the standard library.
"""

import json
from typing import Any
from urllib.parse import parse_qs

from hammock.errors import BadRequest, ConfigurationError


def flatten(parsed: dict[str, list[str]]) -> dict[str, Any]:
    """Collapse single-item value lists to their only value."""
    return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}


def parse_query(query_string: bytes | str) -> dict[str, Any]:
    """Parse a query string into a flat mapping."""
    if isinstance(query_string, bytes):
        query_string = query_string.decode("latin-1")
    return flatten(parse_qs(query_string, keep_blank_values=True))


def parse_body(body: bytes, content_type: str | None) -> dict[str, Any]:
    """Parse a request body according to its Content-Type.

    Unknown or missing content types and empty bodies yield ``{}``.
    Raises ``BadRequest`` for a form body that is not UTF-8, a multipart
    body the parser rejects, malformed JSON, or a JSON body that is not
    an object.
    """
    if not body:
        return {}
    ct_lower = (content_type or "").lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BadRequest("Malformed form body") from exc
        return flatten(parse_qs(text, keep_blank_values=True))

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type or "")

    if ct_lower == "application/json" or ct_lower.endswith("+json"):
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise BadRequest(f"Malformed JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise BadRequest("JSON body must be an object")
        return data

    return {}


def _parse_multipart(body: bytes, content_type: str) -> dict[str, Any]:
    """Parse multipart form fields using python-multipart.

    File parts are kept as raw bytes under their field name.
    """
    try:
        from python_multipart.exceptions import MultipartParseError
        from python_multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Multipart body parsing requires the 'python-multipart' package. "
            "Install it with: pip install python-multipart"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        raise BadRequest("Multipart body missing boundary parameter")

    fields: dict[str, list[Any]] = {}
    current_data = bytearray()
    current_name: str | None = None
    current_is_file = False
    pending_header = ""

    def on_part_begin() -> None:
        nonlocal current_data, current_name, current_is_file
        current_data = bytearray()
        current_name = None
        current_is_file = False

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        current_data.extend(chunk[start:end])

    def on_part_end() -> None:
        if current_name is None:
            return
        value: Any = bytes(current_data)
        if not current_is_file:
            value = value.decode("utf-8", errors="replace")
        fields.setdefault(current_name, []).append(value)

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        nonlocal pending_header
        pending_header = chunk[start:end].decode("latin-1").lower()

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        nonlocal current_name, current_is_file
        if pending_header != "content-disposition":
            return
        _, params = parse_options_header(chunk[start:end])
        name = params.get(b"name")
        if name is not None:
            current_name = name.decode("utf-8", errors="replace")
        current_is_file = b"filename" in params

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
    }
    parser = MultipartParser(boundary, callbacks)
    try:
        parser.write(body)
        parser.finalize()
    except MultipartParseError as exc:
        raise BadRequest(f"Malformed multipart body: {exc}") from exc
    return flatten(fields)
