"""Swagger 2.0 document models produced by the assembler.

Dump with ``document.to_dict()``: aliases are applied and unset fields are
left out, so the result maps one-to-one onto the JSON/YAML form.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFINITIONS_REF = "#/definitions/"


class DocModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Schema(DocModel):
    """Schema object; used for properties, definitions and references alike."""

    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = None
    format: str | None = None
    description: str | None = None
    default: Any = None
    enum: list[str] | None = None
    items: "Schema | None" = None
    additional_properties: "Schema | None" = Field(default=None, alias="additionalProperties")
    properties: dict[str, "Schema"] | None = None
    required: list[str] | None = None

    @classmethod
    def reference(cls, name: str) -> "Schema":
        return cls(ref=DEFINITIONS_REF + name)


class Parameter(DocModel):
    name: str
    location: str = Field(alias="in")  # path / query / body
    description: str | None = None
    required: bool = False
    type: str | None = None
    default: Any = None
    example: str | None = Field(default=None, alias="x-example")
    schema_: Schema | None = Field(default=None, alias="schema")


class Response(DocModel):
    description: str = ""
    schema_: Schema | None = Field(default=None, alias="schema")


class Operation(DocModel):
    tags: list[str] = []
    description: str | None = None
    consumes: list[str] | None = None
    produces: list[str] | None = None
    parameters: list[Parameter] | None = None
    responses: dict[str, Response] = {}
    deprecated: bool | None = None

    def add_parameters(self, params: list[Parameter]) -> None:
        if params:
            self.parameters = (self.parameters or []) + list(params)


class PathItem(DocModel):
    """Operations of one path, at most one per HTTP action."""

    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    patch: Operation | None = None
    parameters: list[Parameter] | None = None

    def operation(self, action: str) -> Operation | None:
        return getattr(self, action.lower())

    def set_operation(self, action: str, op: Operation | None) -> None:
        setattr(self, action.lower(), op)

    def methods(self) -> list[str]:
        """Upper-case names of the actions that carry an operation."""
        return [
            name.upper()
            for name in ("get", "put", "post", "delete", "options", "patch")
            if getattr(self, name) is not None
        ]

    def is_empty(self) -> bool:
        return not self.methods()


class Tag(DocModel):
    name: str
    description: str | None = None


class Info(DocModel):
    title: str = "API"
    version: str = "1.0"
    description: str | None = None


class SwaggerDocument(DocModel):
    swagger: str = "2.0"
    info: Info | None = None
    host: str | None = None
    base_path: str = Field(default="/", alias="basePath")
    tags: list[Tag] = []
    schemes: list[str] = []
    consumes: list[str] = []
    produces: list[str] = []
    paths: dict[str, PathItem] = {}
    definitions: dict[str, Schema] = {}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
