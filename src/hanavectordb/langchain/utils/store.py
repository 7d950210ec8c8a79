"""Construction of ``HanaDB`` stores from pipeline configuration.

The ``hana`` section carries both the connection settings and the table
layout:

.. code-block:: yaml

    hana:
      address: ${HANA_ADDRESS}
      port: ${HANA_PORT:-443}
      user: ${HANA_USER}
      password: ${HANA_PASSWORD}
      table_name: EMBEDDINGS
      content_column: VEC_TEXT
      metadata_column: VEC_META
      vector_column: VEC_VECTOR
      vector_column_length: -1
      distance_strategy: cosine
      specific_metadata_columns: [title]
      hnsw:
        m: 64
        ef_construction: 128
        ef_search: 200
"""

from typing import Any, Optional

from langchain_core.embeddings import Embeddings

from hanavectordb.langchain.vectorstore import HanaDB
from hanavectordb.utils.config import (
    DEFAULT_CONTENT_COLUMN,
    DEFAULT_METADATA_COLUMN,
    DEFAULT_TABLE_NAME,
    DEFAULT_VECTOR_COLUMN,
    DEFAULT_VECTOR_COLUMN_LENGTH,
)
from hanavectordb.utils.query import DEFAULT_DISTANCE_STRATEGY


class StoreHelper:
    """Builds ``HanaDB`` instances from the ``hana`` config section."""

    @classmethod
    def create_store(
        cls,
        config: dict[str, Any],
        embedding: Embeddings,
        connection: Any = None,
    ) -> HanaDB:
        """Create a store for ``config``.

        Args:
            config: Resolved configuration with a ``hana`` section.
            embedding: Embeddings used by the store.
            connection: Optional open connection; connection settings from
                the config are used when omitted.
        """
        hana_config = config.get("hana", {}) or {}
        connection = connection or hana_config.get("connection")
        connection_settings = {}
        if connection is None:
            connection_settings = {
                "address": hana_config.get("address"),
                "port": int(hana_config.get("port", 443)),
                "user": hana_config.get("user"),
                "password": hana_config.get("password"),
            }

        return HanaDB(
            embedding=embedding,
            connection=connection,
            table_name=hana_config.get("table_name", DEFAULT_TABLE_NAME),
            content_column=hana_config.get("content_column", DEFAULT_CONTENT_COLUMN),
            metadata_column=hana_config.get(
                "metadata_column", DEFAULT_METADATA_COLUMN
            ),
            vector_column=hana_config.get("vector_column", DEFAULT_VECTOR_COLUMN),
            vector_column_length=int(
                hana_config.get("vector_column_length", DEFAULT_VECTOR_COLUMN_LENGTH)
            ),
            distance_strategy=hana_config.get(
                "distance_strategy", DEFAULT_DISTANCE_STRATEGY
            ),
            specific_metadata_columns=hana_config.get("specific_metadata_columns"),
            **connection_settings,
        )

    @classmethod
    def get_hnsw_params(cls, config: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Return HNSW index options, or None when no index is configured."""
        hnsw_config = (config.get("hana", {}) or {}).get("hnsw")
        if not hnsw_config:
            return None
        if hnsw_config is True:
            return {}
        return {
            "m": hnsw_config.get("m"),
            "ef_construction": hnsw_config.get("ef_construction"),
            "ef_search": hnsw_config.get("ef_search"),
            "index_name": hnsw_config.get("index_name"),
        }
