"""Utility modules for the HANA vector store.

Utilities Provided:
    - Sanitization: Identifier, integer, vector and metadata key validation
    - Filters: LangChain-style filter parsing and compilation to SQL predicates
    - Statements: Placeholder-checked SQL fragment assembly
    - Queries: Similarity search, insert and delete statement builders
    - Embedding: Client-side vs in-database embedding expressions
    - Results: Decoding of search rows into LangChain documents
    - Configuration: YAML config loading, environment variable resolution
    - Logging: Logger factory with environment-based configuration

Usage:
    >>> from hanavectordb.utils import FilterCompiler, load_config
    >>> sql, params = FilterCompiler("VEC_META").compile({"year": {"$gte": 2020}})
"""

from hanavectordb.utils.config import (
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_SEARCH_PARAMS,
    get_search_params,
    load_config,
    resolve_env_vars,
    setup_logger,
)
from hanavectordb.utils.config_loader import ConfigLoader
from hanavectordb.utils.embedding import (
    EmbeddingExpression,
    ExternalEmbeddingStrategy,
    InternalEmbeddingStrategy,
    select_embedding_strategy,
)
from hanavectordb.utils.filters import (
    FilterCompiler,
    extract_keyword_search_columns,
    parse_filter,
)
from hanavectordb.utils.logging import LoggerFactory
from hanavectordb.utils.query import QueryBuilder
from hanavectordb.utils.results import map_search_rows, parse_float_array_from_string
from hanavectordb.utils.sanitize import (
    sanitize_int,
    sanitize_list_float,
    sanitize_metadata_keys,
    sanitize_name,
)
from hanavectordb.utils.statement import StatementBuilder


__all__ = [
    "DEFAULT_EMBEDDING_MODEL",
    "DEFAULT_SEARCH_PARAMS",
    "ConfigLoader",
    "EmbeddingExpression",
    "ExternalEmbeddingStrategy",
    "FilterCompiler",
    "InternalEmbeddingStrategy",
    "LoggerFactory",
    "QueryBuilder",
    "StatementBuilder",
    "extract_keyword_search_columns",
    "get_search_params",
    "load_config",
    "map_search_rows",
    "parse_filter",
    "parse_float_array_from_string",
    "resolve_env_vars",
    "sanitize_int",
    "sanitize_list_float",
    "sanitize_metadata_keys",
    "sanitize_name",
    "select_embedding_strategy",
    "setup_logger",
]
