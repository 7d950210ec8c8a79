"""Logging setup for hanavectordb.

All modules log through ``logging.getLogger(__name__)``. Applications and
pipelines that want a configured root handler go through :class:`LoggerFactory`,
which calls ``logging.basicConfig`` at most once per process so repeated
store or pipeline construction does not stack handlers.

Usage:
    >>> from hanavectordb.utils.logging import LoggerFactory
    >>> logger = LoggerFactory("hanavectordb.pipeline").get_logger()
    >>> logger.info("Indexed %d documents", 10)

    # Or take the level from LOG_LEVEL
    >>> logger = LoggerFactory.configure_from_env("hanavectordb").get_logger()
"""

import logging
import os


DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggerFactory:
    """Creates named loggers and configures logging once per process.

    Attributes:
        logger_name (str): Name of the logger.
        log_level (int): Level applied to the logger.
        log_format (str): Format used when the root handler is configured.
        logger (logging.Logger): The logger instance.
    """

    _is_logger_initialized: bool = False

    def __init__(
        self,
        logger_name: str,
        log_level: int = logging.INFO,
        log_format: str = DEFAULT_LOG_FORMAT,
    ) -> None:
        self.logger_name = logger_name
        self.log_level = log_level
        self.log_format = log_format
        self.logger = self._initialize_logger()

    def _initialize_logger(self) -> logging.Logger:
        if not LoggerFactory._is_logger_initialized:
            logging.basicConfig(level=self.log_level, format=self.log_format)
            LoggerFactory._is_logger_initialized = True

        logger = logging.getLogger(self.logger_name)
        logger.setLevel(self.log_level)
        return logger

    def get_logger(self) -> logging.Logger:
        """Return the configured logger instance."""
        return self.logger

    @staticmethod
    def parse_level(level: str | int | None, default: int = logging.INFO) -> int:
        """Translate a level name such as ``"debug"`` into its numeric value.

        Unknown names fall back to ``default``.
        """
        if isinstance(level, int):
            return level
        if not level:
            return default
        value = getattr(logging, str(level).upper(), None)
        return value if isinstance(value, int) else default

    @staticmethod
    def configure_from_env(
        logger_name: str, env_var: str = "LOG_LEVEL"
    ) -> "LoggerFactory":
        """Create a factory whose level comes from an environment variable.

        Args:
            logger_name (str): Name of the logger.
            env_var (str, optional): Variable holding the level name.

        Returns:
            LoggerFactory: Factory with the resolved level (INFO if unset or
            invalid).
        """
        log_level = LoggerFactory.parse_level(os.getenv(env_var, "INFO"))
        return LoggerFactory(logger_name, log_level=log_level)
