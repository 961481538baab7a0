"""Configuration module -- exports the Settings class."""

from docqa.config.settings import EMBEDDING_DIMENSION, Settings

__all__ = ["EMBEDDING_DIMENSION", "Settings"]
