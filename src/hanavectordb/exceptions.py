"""Exceptions raised by the hanavectordb package."""


class HanaVectorDBError(Exception):
    """Base exception for all hanavectordb errors."""


class InvalidArgumentError(HanaVectorDBError, ValueError):
    """Raised for malformed filters, wrong arity or type, or bad identifiers."""


class UnsupportedOperatorError(HanaVectorDBError, ValueError):
    """Raised when a filter uses an unknown comparator or logical operator."""


class ConfigurationError(HanaVectorDBError):
    """Raised when the store configuration or table schema is unusable."""


class DecodeError(HanaVectorDBError):
    """Raised when a row returned by the database cannot be decoded."""


class ExecutionError(HanaVectorDBError):
    """Raised when the database rejects a statement.

    The driver's message is kept verbatim and the original exception is
    chained as ``__cause__``.
    """
