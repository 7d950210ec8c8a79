"""Test suite for the hanavectordb library.

The test suite is organized into the following modules:
- tests/databases: Tests for the HANA database wrapper and its SQL
- tests/langchain: Tests for the LangChain vector store, helpers and pipelines
- tests/utils: Tests for filter compilation, query building and configuration

The ``hdbcli`` driver is replaced with a mock in ``tests/conftest.py``; no test
needs a running HANA instance.
"""
