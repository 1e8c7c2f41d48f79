"""
Restify configuration: validated settings plus config-file loading.

Modules
-------
settings    DatabaseSettings (pydantic-settings) and RestifyConfig
loader      YAML/JSON config discovery and parsing
"""

from .loader import CONFIG_ENV_VAR, find_config, load_config, parse_document
from .settings import DatabaseSettings, RestifyConfig

__all__ = [
    "CONFIG_ENV_VAR",
    "DatabaseSettings",
    "RestifyConfig",
    "find_config",
    "load_config",
    "parse_document",
]
