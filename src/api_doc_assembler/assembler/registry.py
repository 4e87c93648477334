"""Schema registry: one named definition per document kind.

A registry lives for a single assembly run. Kinds are registered at most
once; the first registration fixes the display name and the definition.

Display names are the kind in dotted form with the longest configured
strip-prefix removed. Two kinds may strip down to the same name; both stay
registered, and ``definitions()`` keeps whichever was registered last.
"""

import logging
from typing import Iterable

from api_doc_assembler.assembler.document import Schema
from api_doc_assembler.metadata.base import PropertyDescription, PropertyType, SchemaDescriptor
from api_doc_assembler.metadata.provider import SchemaProvider, build_kind

logger = logging.getLogger(__name__)

_SIMPLE_TYPES = {
    PropertyType.BOOLEAN: ("boolean", None),
    PropertyType.BYTES: ("string", "byte"),
    PropertyType.DATE: ("string", "date-time"),
    PropertyType.DOUBLE: ("number", "double"),
    PropertyType.INTERNET_ADDRESS_V4: ("string", None),
    PropertyType.INTERNET_ADDRESS_V6: ("string", None),
    PropertyType.LONG: ("integer", "int64"),
    PropertyType.STRING: ("string", None),
    PropertyType.URI: ("string", "uri"),
}


class SchemaRegistry:
    """Deduplicates schema definitions by kind."""

    def __init__(self, provider: SchemaProvider | None = None, strip_prefixes: Iterable[str] = ()):
        self._provider = provider
        prefixes = {p.replace(":", ".").strip(".") for p in strip_prefixes}
        self._strip_prefixes = sorted((p for p in prefixes if p), key=len, reverse=True)
        self._by_kind: dict[str, tuple[str, Schema]] = {}

    def __contains__(self, kind: str) -> bool:
        return build_kind(kind) in self._by_kind

    def __len__(self) -> int:
        return len(self._by_kind)

    def display_name(self, kind: str) -> str:
        name = kind.replace(":", ".")
        for prefix in self._strip_prefixes:
            if name.startswith(prefix + "."):
                return name[len(prefix) + 1:]
        return name

    def register(self, descriptor: SchemaDescriptor) -> str:
        """Register ``descriptor`` unless its kind is known; return its name."""
        kind = build_kind(descriptor.kind)
        known = self._by_kind.get(kind)
        if known is not None:
            return known[0]

        name = self.display_name(kind)
        schema = Schema(type="object", description=descriptor.description)
        # reserved before the properties are built so self-referencing kinds terminate
        self._by_kind[kind] = (name, schema)
        logger.debug("Registered schema %s for kind %s", name, kind)

        properties: dict[str, Schema] = {}
        required = []
        for prop_name, prop in descriptor.properties.items():
            properties[prop_name] = self.property_schema(prop)
            if prop.required:
                required.append(prop_name)
        schema.properties = properties
        schema.required = required or None
        return name

    def register_type(self, type_name: str) -> str | None:
        """Register a type by name through the provider.

        Returns None when the provider does not know the type.
        """
        kind = build_kind(type_name)
        known = self._by_kind.get(kind)
        if known is not None:
            return known[0]
        if self._provider is None:
            return None
        descriptor = self._provider.describe(type_name)
        if descriptor is None:
            return None
        return self.register(descriptor)

    def get(self, kind: str) -> Schema | None:
        known = self._by_kind.get(build_kind(kind))
        return known[1] if known else None

    def property_schema(self, prop: PropertyDescription) -> Schema:
        if prop.type_name in _SIMPLE_TYPES:
            type_, format_ = _SIMPLE_TYPES[prop.type_name]
            return Schema(type=type_, format=format_, description=prop.description)

        if prop.type_name == PropertyType.ENUM:
            return Schema(type="string", enum=prop.enum_values or None, description=prop.description)

        if prop.type_name == PropertyType.COLLECTION:
            items = prop.element_description
            return Schema(
                type="array",
                items=self.property_schema(items) if items else Schema(type="object"),
                description=prop.description,
            )

        if prop.type_name == PropertyType.MAP:
            values = prop.element_description
            return Schema(
                type="object",
                additional_properties=self.property_schema(values) if values else None,
                description=prop.description,
            )

        # PODO
        if not prop.kind:
            return Schema(type="object", description=prop.description)
        descriptor = prop.to_descriptor()
        if not prop.field_descriptions and self._provider is not None:
            descriptor = self._provider.describe(prop.kind) or descriptor
        return Schema.reference(self.register(descriptor))

    def definitions(self) -> dict[str, Schema]:
        """Name-sorted snapshot of every registered definition."""
        by_name: dict[str, Schema] = {}
        for name, schema in self._by_kind.values():
            by_name[name] = schema
        return dict(sorted(by_name.items()))
