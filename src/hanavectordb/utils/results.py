"""Conversion of HANA result rows into LangChain documents.

Similarity search rows have the shape ``(content, metadata, vector, score)``
where metadata is serialized JSON and the vector is the ``TO_NVARCHAR``
rendering of a ``REAL_VECTOR``, e.g. ``"[0.1,0.2,0.3]"``. NCLOB values may come
back from the driver as LOB objects or bytes; both are read into text first.
"""

import json
from typing import Any, Sequence

from langchain_core.documents import Document

from hanavectordb.exceptions import DecodeError


def read_text(value: Any) -> str:
    """Return a driver value (str, bytes or LOB) as text."""
    if hasattr(value, "read"):
        value = value.read()
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Value is not valid UTF-8: {e}") from e
    if not isinstance(value, str):
        raise DecodeError(f"Expected text, got {type(value).__name__}")
    return value


def parse_float_array_from_string(array_as_string: Any) -> list[float]:
    """Parse ``"[1.0,2.0]"`` into ``[1.0, 2.0]``.

    Raises:
        DecodeError: If the text is not a bracketed, comma separated list of
            numbers.
    """
    text = read_text(array_as_string).strip()
    if len(text) < 2 or text[0] != "[" or text[-1] != "]":
        raise DecodeError(f"Malformed vector text: {text[:50]!r}")
    inner = text[1:-1].strip()
    if not inner:
        return []
    try:
        return [float(token) for token in inner.split(",")]
    except ValueError as e:
        raise DecodeError(f"Malformed vector text: {text[:50]!r}") from e


def parse_metadata(value: Any) -> dict[str, Any]:
    """Decode the serialized metadata column into a dict.

    Raises:
        DecodeError: If the value is not a JSON object.
    """
    if value is None:
        return {}
    text = read_text(value)
    try:
        metadata = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed metadata: {e}") from e
    if not isinstance(metadata, dict):
        raise DecodeError(
            f"Metadata must be a JSON object, got {type(metadata).__name__}"
        )
    return metadata


def map_search_row(row: Sequence[Any]) -> tuple[Document, float, list[float]]:
    """Convert one similarity search row into ``(document, score, vector)``."""
    values = tuple(row)
    if len(values) < 4:
        raise DecodeError(f"Expected 4 columns in search result, got {len(values)}")
    content, metadata, vector, score = values[:4]
    doc = Document(
        page_content=read_text(content) if content is not None else "",
        metadata=parse_metadata(metadata),
    )
    try:
        score = float(score)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Malformed score: {score!r}") from e
    return doc, score, parse_float_array_from_string(vector)


def map_search_rows(
    rows: Sequence[Sequence[Any]],
) -> list[tuple[Document, float, list[float]]]:
    """Convert similarity search rows, failing on the first malformed row."""
    return [map_search_row(row) for row in rows]
