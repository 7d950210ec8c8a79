"""Tests for the HANA database wrapper in ``hanavectordb.databases``."""
