"""Configuration files for KGP."""

from pathlib import Path

CONFIG_DIR = Path(__file__).parent
DEFAULT_PROPERTIES_FILE = CONFIG_DIR / "properties.yaml"

__all__ = ["CONFIG_DIR", "DEFAULT_PROPERTIES_FILE"]
