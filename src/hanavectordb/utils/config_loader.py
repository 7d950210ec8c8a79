"""Loading and validation of pipeline configurations.

Pipelines accept either a configuration dict or a path to a YAML file. Both go
through :meth:`ConfigLoader.load`, which resolves ``${VAR}`` references, and
:meth:`ConfigLoader.validate`, which checks the sections a HANA pipeline needs.

Required Sections:
    - embeddings: ``model`` for client-side embeddings, or
      ``internal_model_id`` to embed inside HANA
    - hana: ``address`` and ``user`` to open a connection

Usage:
    >>> from hanavectordb.utils.config_loader import ConfigLoader
    >>> config = ConfigLoader.load("hana.yaml")
    >>> ConfigLoader.validate(config, "hana")
"""

from pathlib import Path
from typing import Any

from hanavectordb.exceptions import ConfigurationError
from hanavectordb.utils.config import load_config, resolve_env_vars


REQUIRED_DB_KEYS: dict[str, list[str]] = {
    "hana": ["address", "user"],
}


class ConfigLoader:
    """Handles loading and validating pipeline configurations."""

    @classmethod
    def load(cls, config_or_path: dict[str, Any] | str | Path) -> dict[str, Any]:
        """Load and resolve configuration from a dict or a YAML file.

        Args:
            config_or_path: Configuration dict or path to a YAML file.

        Returns:
            Resolved configuration dictionary.
        """
        if isinstance(config_or_path, dict):
            return resolve_env_vars(config_or_path)
        return load_config(config_or_path)

    @classmethod
    def validate(cls, config: dict[str, Any], db_type: str = "hana") -> None:
        """Check that required sections and connection keys are present.

        Args:
            config: Configuration dictionary.
            db_type: Name of the database section.

        Raises:
            ConfigurationError: If a section or key is missing.
        """
        required = ["embeddings", db_type]
        missing = [k for k in required if k not in config]
        if missing:
            raise ConfigurationError(f"Missing required config sections: {missing}")

        db_config = config[db_type] or {}
        if db_config.get("connection") is None:
            missing_keys = [
                k for k in REQUIRED_DB_KEYS.get(db_type, []) if not db_config.get(k)
            ]
            if missing_keys:
                raise ConfigurationError(
                    f"Missing required '{db_type}' settings: {missing_keys}"
                )
