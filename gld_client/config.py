"""
Client configuration and logging setup.

Settings live in a small JSON file next to the client. A missing file is
created with defaults; an unreadable or invalid one falls back to defaults.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .resolver import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "polydystopia_server_config.json"
DEFAULT_SERVER_URL = "https://dev.polydystopia.xyz"


class ServerConfig(BaseModel):
    """Validated client settings.

    ``ServerUrl`` and ``VerboseLogging`` are the keys written by older
    clients; the snake_case field names are accepted as well. Unknown keys
    are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True, extra="ignore")

    server_url: str = Field(default=DEFAULT_SERVER_URL, alias="ServerUrl", min_length=1)
    verbose_logging: bool = Field(default=False, alias="VerboseLogging")
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    accept_numeric_identifiers: bool = True
    capture_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'ServerConfig':
        """Build a config from a JSON object.

        Raises:
            pydantic.ValidationError: If a value has the wrong type or range
        """
        return cls.model_validate(raw)


def load_config(path: str = CONFIG_FILE_NAME) -> ServerConfig:
    """
    Load configuration from path.

    Writes a default file if none exists. Returns defaults when the file is
    unreadable, is not a JSON object, or fails validation.
    """
    try:
        if os.path.exists(path):
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")

            config = ServerConfig.from_dict(raw)
            logger.info(f"Loaded config from {path}:")
            logger.info(f"- Server URL: {config.server_url}")
            logger.info(f"- Verbose Logging: {config.verbose_logging}")
            return config

        config = ServerConfig()
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.model_dump(), f, indent=2)
        logger.info(f"Created default config file {path}")
        logger.info(f"- Server URL: {config.server_url}")
        return config

    except ValidationError as e:
        logger.error(f"Invalid config file {path}: {e.error_count()} error(s). Using defaults.\n{e}")
        return ServerConfig()
    except (OSError, ValueError) as e:
        logger.error(f"Error reading config file: {e}. Using defaults.")
        return ServerConfig()


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr; DEBUG when verbose, INFO otherwise."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
