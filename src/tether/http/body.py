"""Content-type-driven body parsing for the canonical request.

Rules:

- ``GET``, ``HEAD`` and ``OPTIONS`` never read a body.
- ``application/json`` (and ``+json`` suffixes) is parsed as JSON. A
  parse failure on ``POST``/``PUT``/``PATCH`` raises
  ``InvalidRequestError("Invalid body")``; on other methods the raw
  text is passed through.
- Form encodings are decoded into a dict (see ``FormData.to_dict``).
- Anything else passes the decoded text through, or ``None`` when empty.
"""

import json
from typing import Any

from tether.errors import FieldError, InvalidRequestError
from tether.http.forms import is_form_content_type, parse_form_data

BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def is_json_content_type(content_type: str) -> bool:
    media = content_type.lower().split(";")[0].strip()
    return media == "application/json" or media.endswith("+json")


def _charset(content_type: str) -> str:
    for param in content_type.split(";")[1:]:
        name, _, value = param.strip().partition("=")
        if name.lower() == "charset" and value:
            return value.strip('"')
    return "utf-8"


async def parse_body(method: str, content_type: str | None, raw: bytes | str | None) -> Any:
    """Parse *raw* into the canonical body for *method* and *content_type*."""
    method = method.upper()
    if method in BODYLESS_METHODS:
        return None
    if raw is None or raw in (b"", ""):
        return None

    content_type = content_type or ""
    if isinstance(raw, bytes):
        raw_bytes = raw
        try:
            text = raw.decode(_charset(content_type))
        except (LookupError, UnicodeDecodeError):
            text = raw.decode("utf-8", errors="replace")
    else:
        raw_bytes = raw.encode("utf-8")
        text = raw

    if is_json_content_type(content_type):
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            if method in BODY_METHODS:
                raise InvalidRequestError(
                    "Invalid body",
                    [FieldError("body", f"Malformed JSON: {exc.msg}")],
                    cause=exc,
                ) from exc
            return text

    if is_form_content_type(content_type):
        try:
            form = await parse_form_data(raw_bytes, content_type)
        except ValueError as exc:
            raise InvalidRequestError(
                "Invalid body",
                [FieldError("body", str(exc))],
                cause=exc,
            ) from exc
        return form.to_dict()

    return text
