"""Models for the metadata that services publish about themselves.

A metadata batch is what the collector brings back from a host: one
template query result per resource plus the per-resource retrieval errors.
The assembler only reads these models, it never mutates them.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api_doc_assembler.errors import UnknownActionError

TEMPLATE_SUFFIX = "/template"


class WireModel(BaseModel):
    """Frozen model reading and writing the camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SupportLevel(str, Enum):
    """Ordered documentation tier of a route, lowest first."""

    NOT_SUPPORTED = "NOT_SUPPORTED"
    INTERNAL = "INTERNAL"
    DEPRECATED = "DEPRECATED"
    SUPPORTED = "SUPPORTED"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        token = value.strip().upper()
        if token == "NOTSUPPORTED":
            return cls.NOT_SUPPORTED
        if token == "PUBLIC":
            return cls.SUPPORTED
        for member in cls:
            if member.value == token:
                return member
        return None

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def is_below(self, threshold: "SupportLevel") -> bool:
        return self.rank < threshold.rank


class ParamRole(str, Enum):
    PATH = "PATH"
    QUERY = "QUERY"
    BODY = "BODY"
    RESPONSE = "RESPONSE"
    CONSUMES = "CONSUMES"
    PRODUCES = "PRODUCES"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        return None


class Action(str, Enum):
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, token: str, route_description: str = "") -> "Action":
        """Parse a wire token, raising UnknownActionError for anything else."""
        try:
            return cls(token.upper())
        except (ValueError, AttributeError):
            raise UnknownActionError(str(token), route_description) from None


class PropertyType(str, Enum):
    BOOLEAN = "BOOLEAN"
    BYTES = "BYTES"
    COLLECTION = "COLLECTION"
    DATE = "DATE"
    DOUBLE = "DOUBLE"
    ENUM = "ENUM"
    INTERNET_ADDRESS_V4 = "InternetAddressV4"
    INTERNET_ADDRESS_V6 = "InternetAddressV6"
    LONG = "LONG"
    MAP = "MAP"
    PODO = "PODO"
    STRING = "STRING"
    URI = "URI"


class PropertyDescription(WireModel):
    """Shape of a single document field."""

    type_name: PropertyType
    description: str | None = Field(
        default=None, validation_alias=AliasChoices("description", "propertyDocumentation")
    )
    kind: str | None = None  # set for PODO fields
    element_description: "PropertyDescription | None" = None  # COLLECTION / MAP values
    field_descriptions: dict[str, "PropertyDescription"] = {}  # PODO fields
    enum_values: list[str] = []
    required: bool = False

    def to_descriptor(self) -> "SchemaDescriptor | None":
        """Nested PODO fields become schemas of their own."""
        if not self.kind:
            return None
        return SchemaDescriptor(
            kind=self.kind,
            description=self.description,
            properties=self.field_descriptions,
        )


class SchemaDescriptor(WireModel):
    """Structural description of one document type, identified by its kind."""

    kind: str
    description: str | None = None
    properties: dict[str, PropertyDescription] = {}


class RouteParameter(WireModel):
    name: str
    role: ParamRole = Field(validation_alias=AliasChoices("role", "paramDef"))
    type: str | None = None
    required: bool = False
    value: str | None = None  # default value
    description: str | None = None


class RouteDeclaration(WireModel):
    """A declared (path suffix, action) handler with its parameter metadata."""

    path: str | None = ""
    action: str
    support_level: SupportLevel | None = None
    description: str | None = None
    parameters: list[RouteParameter] = []
    request_type: str | None = None
    response_type: str | None = None


class DocumentDescription(WireModel):
    name: str | None = None
    description: str | None = None
    property_descriptions: dict[str, PropertyDescription] = {}
    service_request_routes: dict[str, list[RouteDeclaration]] = {}

    def routes(self) -> list[RouteDeclaration]:
        """Flatten the per-action route table in declaration order."""
        return [route for routes in self.service_request_routes.values() for route in routes]


class TemplateDocument(WireModel):
    """A document instance as returned by a resource's template endpoint."""

    document_kind: str
    document_description: DocumentDescription | None = None

    def to_descriptor(self) -> SchemaDescriptor:
        desc = self.document_description
        return SchemaDescriptor(
            kind=self.document_kind,
            description=desc.description if desc else None,
            properties=desc.property_descriptions if desc else {},
        )


class ResourceMetadata(WireModel):
    """Everything retrieved about one resource."""

    path: str
    documents: dict[str, TemplateDocument] | None = None
    document_description: DocumentDescription | None = None

    @property
    def resource_path(self) -> str:
        return normalize_path(self.path)

    def first_document(self) -> TemplateDocument | None:
        if not self.documents:
            return None
        return next(iter(self.documents.values()))


class BatchResult(WireModel):
    """Outcome of gathering metadata from every resource of a host.

    Identifiers listed in ``errors`` failed to retrieve; they are never
    assembled even when a stale entry exists in ``resources``.
    """

    host: str | None = None
    resources: dict[str, ResourceMetadata] = {}
    errors: dict[str, str] = {}
    schemas: dict[str, SchemaDescriptor] = {}  # type name -> description

    def successes(self) -> list[ResourceMetadata]:
        """Retrieved resources in identifier order, failed identifiers left out."""
        return [self.resources[key] for key in sorted(self.resources) if key not in self.errors]


def normalize_path(path: str) -> str:
    """Resource path for a metadata URI: no trailing slash, no template suffix."""
    path = path.rstrip("/")
    if path.endswith(TEMPLATE_SUFFIX):
        path = path[: -len(TEMPLATE_SUFFIX)].rstrip("/")
    return path or "/"
