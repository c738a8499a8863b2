"""Form body decoding: URL-encoded and multipart.

``FormData`` implements ``MultiValueMapping`` for consistent access
across ``Headers``, ``QueryParams`` and forms. The canonical request
body for a form is ``FormData.to_dict()``: scalars for single fields,
ordered lists for repeated fields, ``UploadFile`` for files.

URL-encoded forms use stdlib ``urllib.parse``; multipart uses
``python-multipart``.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl

from python_multipart.multipart import MultipartParser, parse_options_header

from tether._internal.multimap import to_canonical


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file part of a multipart body, held in memory."""

    filename: str
    content_type: str
    content: bytes = field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    async def read(self) -> bytes:
        return self.content

    async def save(self, path: Path) -> None:
        """Write the content to *path*. Parent directories must exist."""
        path.write_bytes(self.content)


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    ``__getitem__`` returns the first value for a key (string fields only).
    ``get_list`` returns all values for a key.
    ``files`` provides access to uploaded files by field name.
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]],
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_files", files or {})

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by field name."""
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (checkboxes, multi-selects)."""
        return list(self._data.get(key, []))

    def to_dict(self) -> dict[str, Any]:
        """Canonical body: fields collapsed like query params, files merged in."""
        result: dict[str, Any] = dict(to_canonical(self, list_valued=True))
        result.update(self._files)
        return result


def is_form_content_type(content_type: str) -> bool:
    media = content_type.lower().split(";")[0].strip()
    return media in ("application/x-www-form-urlencoded", "multipart/form-data")


async def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body into FormData.

    Raises:
        ValueError: If the content type is not a form encoding, or a
            multipart body has no boundary.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        return _parse_urlencoded(body)

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_urlencoded(body: bytes) -> FormData:
    data: dict[str, list[str]] = {}
    for key, value in parse_qsl(body.decode("utf-8"), keep_blank_values=True):
        data.setdefault(key, []).append(value)
    return FormData(data)


def _disposition(value: str) -> tuple[str | None, str | None]:
    """``(name, filename)`` from a ``Content-Disposition`` header value."""
    _, params = parse_options_header(value.encode("latin-1"))
    name = params.get(b"name")
    filename = params.get(b"filename")
    return (
        name.decode("utf-8") if name is not None else None,
        filename.decode("utf-8") if filename is not None else None,
    )


class _PartCollector:
    """Accumulates ``MultipartParser`` callbacks into fields and files.

    One instance per body. A part without a ``name`` is dropped; a
    part with a ``filename`` becomes an ``UploadFile``.
    """

    __slots__ = ("_buffer", "_header", "_headers", "fields", "files")

    def __init__(self) -> None:
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self._headers: dict[str, str] = {}
        self._header = ""
        self._buffer = bytearray()

    def callbacks(self) -> dict[str, Any]:
        return {
            "on_part_begin": self.begin,
            "on_header_field": self.header_field,
            "on_header_value": self.header_value,
            "on_part_data": self.data,
            "on_part_end": self.end,
        }

    def begin(self) -> None:
        self._headers = {}
        self._buffer = bytearray()

    def header_field(self, data: bytes, start: int, end: int) -> None:
        self._header = data[start:end].decode("latin-1").lower()

    def header_value(self, data: bytes, start: int, end: int) -> None:
        self._headers[self._header] = data[start:end].decode("latin-1")

    def data(self, data: bytes, start: int, end: int) -> None:
        self._buffer.extend(data[start:end])

    def end(self) -> None:
        name, filename = _disposition(self._headers.get("content-disposition", ""))
        if name is None:
            return
        content = bytes(self._buffer)
        if filename is None:
            self.fields.setdefault(name, []).append(content.decode("utf-8", errors="replace"))
            return
        self.files[name] = UploadFile(
            filename=filename,
            content_type=self._headers.get("content-type", "application/octet-stream"),
            content=content,
        )


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    return FormData(collector.fields, collector.files)
