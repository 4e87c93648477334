"""Serializes an assembled document as JSON or YAML."""

import json

import yaml

from api_doc_assembler.assembler.document import SwaggerDocument
from api_doc_assembler.errors import EncodingError

MEDIA_TYPE_JSON = "application/json"
MEDIA_TYPE_YAML = "text/yaml"


def wants_yaml(accept: str | None) -> bool:
    """True when an Accept value (or a bare format name) asks for YAML."""
    return bool(accept) and ("yml" in accept or "yaml" in accept)


def encode_document(document: SwaggerDocument, accept: str | None = None) -> tuple[str, str]:
    """Return ``(content_type, text)`` for the document.

    YAML when ``accept`` mentions yml/yaml, pretty-printed JSON otherwise.
    """
    data = document.to_dict()
    try:
        if wants_yaml(accept):
            return MEDIA_TYPE_YAML, yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        return MEDIA_TYPE_JSON, json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError, yaml.YAMLError) as e:
        raise EncodingError(f"Cannot encode document: {e}") from e
