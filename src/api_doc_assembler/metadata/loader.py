"""Reads and writes metadata batch files (JSON or YAML)."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from api_doc_assembler.errors import MetadataError
from api_doc_assembler.metadata.base import BatchResult


def load_batch(file_path: Path) -> BatchResult:
    """Load a batch file.

    YAML is a superset of JSON, so one loader handles both formats.
    """
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise MetadataError(f"Cannot read metadata batch {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise MetadataError(f"Metadata batch {file_path} must be a mapping")
    try:
        return BatchResult.model_validate(data)
    except ValidationError as e:
        raise MetadataError(f"Invalid metadata batch {file_path}: {e}") from e


def dump_batch(batch: BatchResult, file_path: Path) -> None:
    """Write a batch as YAML, or JSON when the file name ends in ``.json``."""
    if file_path.suffix == ".json":
        text = batch.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    else:
        data = batch.model_dump(mode="json", by_alias=True, exclude_none=True)
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(text, encoding="utf-8")
