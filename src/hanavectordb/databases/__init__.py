"""Database interfaces."""

from hanavectordb.databases.hana import HanaVectorDB


__all__ = ["HanaVectorDB"]
