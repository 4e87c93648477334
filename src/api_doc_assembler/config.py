"""Assembler configuration, loaded from YAML."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from api_doc_assembler.assembler.document import Info
from api_doc_assembler.errors import ConfigError
from api_doc_assembler.metadata.base import SupportLevel

DEFAULT_TITLE = os.getenv("API_DOC_TITLE", "API")
DEFAULT_VERSION = os.getenv("API_DOC_VERSION", "1.0")


class AssemblerConfig(BaseModel):
    info: Info = Info(title=DEFAULT_TITLE, version=DEFAULT_VERSION)
    host: str | None = None
    base_path: str = "/"
    self_link: str | None = None  # the service publishing the document
    excluded_prefixes: list[str] = []
    strip_prefixes: list[str] = []
    support_level: SupportLevel = SupportLevel.DEPRECATED
    exclude_utilities: bool = False


def load_config(path: Path | None = None) -> AssemblerConfig:
    """Load configuration from a YAML file; defaults when no path is given."""
    if path is None:
        return AssemblerConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if data is None:
        return AssemblerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    try:
        return AssemblerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
