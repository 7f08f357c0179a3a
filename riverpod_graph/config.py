"""Configuration management for riverpod-graph.

Loads environment variables (optionally from a .env file) and provides
centralized config access.
"""
import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

__version__ = "0.3.0"


DEFAULT_FRAMEWORK_PACKAGES = "riverpod,flutter_riverpod,hooks_riverpod"
DEFAULT_CONSUMER_BASES = "ConsumerWidget,ConsumerStatefulWidget,HookConsumerWidget"


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_file: Optional[str | Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_file: .env file to load, defaults to ./.env when it exists.
                Variables already set in the environment win.
        """
        env_path = Path(env_file) if env_file else Path.cwd() / ".env"
        if env_path.is_file():
            load_dotenv(env_path)

        self._validate_required()

    def _validate_required(self):
        """Validate the settings the analysis cannot work without.

        Raises:
            ValueError: If no framework package is configured
        """
        if not self.framework_packages:
            raise ValueError(
                "RIVERPOD_GRAPH_PACKAGES is empty. "
                "Set it to the framework's package names, e.g. 'riverpod,flutter_riverpod'."
            )

    @property
    def framework_packages(self) -> List[str]:
        """Top-level packages whose symbols belong to the framework."""
        return _split_list(os.getenv("RIVERPOD_GRAPH_PACKAGES", DEFAULT_FRAMEWORK_PACKAGES))

    @property
    def consumer_bases(self) -> List[str]:
        """Framework base classes making a class a consumer widget."""
        return _split_list(os.getenv("RIVERPOD_GRAPH_CONSUMER_BASES", DEFAULT_CONSUMER_BASES))

    @property
    def build_method(self) -> str:
        """Method of a notifier class holding the provider's body."""
        return os.getenv("RIVERPOD_GRAPH_BUILD_METHOD", "build")

    @property
    def excluded_dirs(self) -> List[str]:
        """Directory names skipped on top of the built-in exclusions."""
        return _split_list(os.getenv("RIVERPOD_GRAPH_EXCLUDED_DIRS"))


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
