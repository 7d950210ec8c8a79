"""Input sanitization for values that end up in generated SQL.

Identifiers (table, column and index names) cannot be bound as parameters in
HANA SQL, so they are reduced to a safe character set before interpolation.
Numeric inputs are validated before they are formatted into statement text,
and metadata keys are checked against the identifier pattern because they
become JSON path segments.

Usage:
    >>> from hanavectordb.utils.sanitize import sanitize_name, sanitize_int
    >>> sanitize_name('EMBEDDINGS"; DROP TABLE X')
    'EMBEDDINGSDROPTABLEX'
    >>> sanitize_int("10")
    10
"""

import math
import numbers
import re
from collections.abc import Mapping, Sequence
from typing import Any

from hanavectordb.exceptions import InvalidArgumentError


IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


def is_valid_identifier(value: Any) -> bool:
    """Return True if ``value`` is a string matching the identifier pattern."""
    return isinstance(value, str) and re.match(IDENTIFIER_PATTERN, value) is not None


def sanitize_name(input_str: str) -> str:
    """Remove every character that is not alphanumeric or an underscore.

    Args:
        input_str: Raw table, column or index name.

    Returns:
        The sanitized (possibly empty) name.
    """
    return re.sub(r"[^A-Za-z0-9_]", "", str(input_str))


def sanitize_int(input_int: Any, lower_bound: int = 0) -> int:
    """Parse ``input_int`` as an integer not smaller than ``lower_bound``.

    Args:
        input_int: Integer, or string holding an integer.
        lower_bound: Smallest accepted value.

    Returns:
        The parsed integer.

    Raises:
        InvalidArgumentError: If the value is not an integer or is below
            ``lower_bound``.
    """
    if isinstance(input_int, bool):
        raise InvalidArgumentError(f"Value ({input_int}) is not an integer")
    if isinstance(input_int, float):
        if not math.isfinite(input_int) or not input_int.is_integer():
            raise InvalidArgumentError(f"Value ({input_int}) is not an integer")
        value = int(input_int)
    else:
        try:
            value = int(str(input_int).strip(), 10)
        except ValueError as e:
            raise InvalidArgumentError(f"Value ({input_int}) is not an integer") from e
    if value < lower_bound:
        raise InvalidArgumentError(
            f"Value ({value}) must not be smaller than {lower_bound}"
        )
    return value


def sanitize_list_float(embedding: Any) -> list[float]:
    """Validate that ``embedding`` is a sequence of finite numbers.

    Args:
        embedding: Candidate vector.

    Returns:
        The vector as a list of floats.

    Raises:
        InvalidArgumentError: If ``embedding`` is not a sequence or holds a
            non-numeric or non-finite element.
    """
    if isinstance(embedding, (str, bytes)) or not isinstance(embedding, Sequence):
        # numpy arrays are not registered as Sequence
        if not hasattr(embedding, "tolist"):
            raise InvalidArgumentError(
                f"Expected 'embedding' to be a sequence, but received "
                f"{type(embedding).__name__}"
            )
        embedding = embedding.tolist()
    result = []
    for value in embedding:
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidArgumentError(f"Value ({value!r}) does not have type float")
        if not math.isfinite(value):
            raise InvalidArgumentError(f"Value ({value!r}) is not a finite number")
        result.append(float(value))
    return result


def sanitize_metadata_keys(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    """Check that every metadata key matches the identifier pattern.

    Args:
        metadata: Metadata mapping of a single document, or None.

    Returns:
        The metadata as a dict (empty if None was given).

    Raises:
        InvalidArgumentError: If any key is not a valid identifier.
    """
    if not metadata:
        return {}
    for key in metadata:
        if not is_valid_identifier(key):
            raise InvalidArgumentError(f"Invalid metadata key {key}")
    return dict(metadata)


def sanitize_specific_metadata_columns(columns: Sequence[str] | None) -> list[str]:
    """Sanitize the names of promoted metadata columns.

    Raises:
        InvalidArgumentError: If a name is not a valid identifier once sanitized.
    """
    sanitized = []
    for column in columns or []:
        name = sanitize_name(column)
        if not is_valid_identifier(name):
            raise InvalidArgumentError(f"Invalid metadata column name {column!r}")
        sanitized.append(name)
    return sanitized
