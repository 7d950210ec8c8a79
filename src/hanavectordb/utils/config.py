"""Configuration loading for HANA vector store pipelines.

Pipelines are configured with YAML files (or plain dicts of the same shape).
String values may reference environment variables so credentials stay out of
the files:

    - ``${VAR}``: value of VAR, empty string if unset
    - ``${VAR:-default}``: value of VAR, or ``default`` if unset

Example configuration:

.. code-block:: yaml

    hana:
      address: ${HANA_ADDRESS}
      port: ${HANA_PORT:-443}
      user: ${HANA_USER}
      password: ${HANA_PASSWORD}
      table_name: EMBEDDINGS
      distance_strategy: cosine
      specific_metadata_columns: [title]
    embeddings:
      model: sentence-transformers/all-MiniLM-L6-v2
    search:
      top_k: 4
      fetch_k: 20
      lambda_mult: 0.5
    logging:
      name: hanavectordb
      level: INFO

Usage:
    >>> from hanavectordb.utils.config import load_config, setup_logger
    >>> config = load_config("hana.yaml")
    >>> logger = setup_logger(config)
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from hanavectordb.utils.logging import LoggerFactory


ENV_VAR_PATTERN = r"\$\{([^}]+)\}"

DEFAULT_TABLE_NAME = "EMBEDDINGS"
DEFAULT_CONTENT_COLUMN = "VEC_TEXT"
DEFAULT_METADATA_COLUMN = "VEC_META"
DEFAULT_VECTOR_COLUMN = "VEC_VECTOR"
# -1 (or 0 on newer HANA releases) means the vector length is not fixed
DEFAULT_VECTOR_COLUMN_LENGTH = -1

DEFAULT_EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"

DEFAULT_SEARCH_PARAMS: dict[str, Any] = {
    "top_k": 4,
    "fetch_k": 20,
    "lambda_mult": 0.5,
}


def resolve_env_vars(value: Any) -> Any:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in strings, dicts and lists.

    Args:
        value: Configuration value of any type.

    Returns:
        The value with every reference substituted. Non-string scalars are
        returned unchanged.
    """
    if isinstance(value, str):

        def replacer(match: re.Match[str]) -> str:
            expr = match.group(1)
            if ":-" in expr:
                var, default = expr.split(":-", 1)
                return os.environ.get(var, default)
            return os.environ.get(expr, "")

        return re.sub(ENV_VAR_PATTERN, replacer, value)
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    return value


def load_config(config_path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and resolve environment variables.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(config_path) as f:
        config = yaml.safe_load(f) or {}
    return resolve_env_vars(config)


def setup_logger(config: dict[str, Any]) -> logging.Logger:
    """Create a logger from the ``logging`` section of a configuration."""
    logging_config = config.get("logging", {}) or {}
    logger_name = logging_config.get("name", "hanavectordb")
    log_level = LoggerFactory.parse_level(logging_config.get("level", "INFO"))

    return LoggerFactory(logger_name, log_level=log_level).get_logger()


def get_search_params(config: dict[str, Any]) -> dict[str, Any]:
    """Return search defaults overridden by the ``search`` section."""
    params = dict(DEFAULT_SEARCH_PARAMS)
    params.update(config.get("search", {}) or {})
    return params
