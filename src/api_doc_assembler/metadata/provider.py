"""Schema-description providers.

The assembler asks a provider to describe a type name whenever a route
refers to one; providers never register anything themselves.
"""

from typing import Iterable, Protocol

from api_doc_assembler.metadata.base import BatchResult, SchemaDescriptor
from api_doc_assembler.metadata.builtin import STANDARD_TYPES


def build_kind(type_name: str) -> str:
    """Kind identifier for a dotted type name (``a.b.C$D`` -> ``a:b:C:D``)."""
    return type_name.replace("$", ":").replace(".", ":")


class SchemaProvider(Protocol):
    def describe(self, type_name: str) -> SchemaDescriptor | None:
        """Return the description of ``type_name``, or None when unknown."""
        ...


class CatalogSchemaProvider:
    """Provider backed by a fixed catalog of descriptors, keyed by kind."""

    def __init__(self, descriptors: Iterable[SchemaDescriptor] = ()):
        self._by_kind: dict[str, SchemaDescriptor] = {}
        self.add_all(STANDARD_TYPES)
        self.add_all(descriptors)

    @classmethod
    def for_batch(cls, batch: BatchResult) -> "CatalogSchemaProvider":
        """Catalog of the standard types, the batch's schemas and every template document."""
        provider = cls(batch.schemas[name] for name in sorted(batch.schemas))
        for meta in batch.successes():
            for doc in (meta.documents or {}).values():
                provider.add(doc.to_descriptor())
        return provider

    def add(self, descriptor: SchemaDescriptor) -> None:
        # first description of a kind wins; dotted and colon kinds are the same kind
        self._by_kind.setdefault(build_kind(descriptor.kind), descriptor)

    def add_all(self, descriptors: Iterable[SchemaDescriptor]) -> None:
        for descriptor in descriptors:
            self.add(descriptor)

    def describe(self, type_name: str) -> SchemaDescriptor | None:
        return self._by_kind.get(build_kind(type_name))

    def __contains__(self, type_name: str) -> bool:
        return build_kind(type_name) in self._by_kind
