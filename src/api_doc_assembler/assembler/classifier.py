"""Classification of declared route parameters into document parameters.

Each route parameter carries a role (path, query, body, response,
consumes, produces). This module turns a route's parameter list into the
document's parameters, responses and media-type lists. Type tokens are
resolved to schemas here too, registering non-primitive types with the
schema registry.
"""

import logging

from pydantic import BaseModel

from api_doc_assembler.assembler.document import Parameter, Response, Schema
from api_doc_assembler.assembler.registry import SchemaRegistry
from api_doc_assembler.metadata.base import ParamRole, RouteDeclaration, RouteParameter
from api_doc_assembler.metadata.builtin import ERROR_RESPONSE
from api_doc_assembler.metadata.provider import build_kind

logger = logging.getLogger(__name__)

PARAM_NAME_BODY = "body"
PARAM_NAME_ID = "id"
DESCRIPTION_SUCCESS = "Success"
DESCRIPTION_ERROR = "Error"
AS_SEPARATOR = "_as_"

# Type tokens as services report them: primitive names or JVM class names.
_NUMERIC_PRIMITIVES = {"int", "long", "short", "byte", "double", "float"}
_GENERIC_OBJECTS = {"object", "java.lang.Object", "com.google.gson.JsonObject"}
_VOID_TYPES = {"void", "java.lang.Void"}
_WRAPPER_TYPES = {
    "string": "string",
    "char": "string",
    "boolean": "boolean",
    "java.lang.String": "string",
    "java.lang.Character": "string",
    "java.lang.Boolean": "boolean",
    "java.lang.Number": "number",
    "java.lang.Integer": "number",
    "java.lang.Long": "number",
    "java.lang.Short": "number",
    "java.lang.Byte": "number",
    "java.lang.Double": "number",
    "java.lang.Float": "number",
    "java.math.BigDecimal": "number",
    "java.math.BigInteger": "number",
}


class ClassifiedRoute(BaseModel):
    """Document-side view of one route's parameter list."""

    parameters: list[Parameter] = []
    responses: dict[str, Response] = {}
    consumes: list[str] = []
    produces: list[str] = []


class Classifier:
    """Builds parameters and responses, registering schemas as it goes."""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    # -- type resolution ------------------------------------------------------

    def resolve_type(self, type_name: str | None) -> Schema | None:
        """Schema for a declared type token.

        Returns None for void types and for tokens nothing can describe;
        the latter are logged and left untyped.
        """
        if not type_name:
            return None
        token = type_name.strip()
        if token in _VOID_TYPES:
            return None
        if token in _NUMERIC_PRIMITIVES:
            return Schema(type="number", format="double")
        if token in _GENERIC_OBJECTS:
            return Schema(type="object")
        if token in _WRAPPER_TYPES:
            primitive = _WRAPPER_TYPES[token]
            if primitive == "number":
                return Schema(type="number", format="double")
            return Schema(type=primitive)

        name = self.registry.register_type(token)
        if name is None:
            logger.error("Cannot resolve declared type %r; leaving it untyped", token)
            return None
        return Schema.reference(name)

    def reference(self, type_name: str) -> Schema | None:
        """Reference to a registered schema, or None when it cannot be resolved."""
        name = self.registry.register_type(type_name)
        if name is None:
            logger.error("Cannot resolve schema type %r; leaving it untyped", type_name)
            return None
        return Schema.reference(name)

    # -- parameters -----------------------------------------------------------

    def path_param(self, param: RouteParameter) -> Parameter:
        return Parameter(
            name=param.name,
            location="path",
            description=param.description,
            required=param.required,
            type=param.type.lower() if param.type else None,
            default=param.value,
        )

    def query_param(self, param: RouteParameter, route: RouteDeclaration) -> Parameter:
        return Parameter(
            name=param.name,
            location="query",
            description=param.description or route.description,
            required=param.required,
            type=param.type.lower() if param.type else None,
            default=param.value,
        )

    def id_param(self) -> Parameter:
        return Parameter(name=PARAM_NAME_ID, location="path", required=True, type="string")

    def body_param(self, schema: Schema | None, name: str = PARAM_NAME_BODY) -> Parameter:
        return Parameter(name=name, location="body", required=False, schema_=schema)

    def body_param_for_type(self, type_name: str) -> Parameter:
        return self.body_param(self.reference(type_name))

    def named_body_param(self, kind: str) -> Parameter:
        """Body parameter named after the short kind, e.g. ``body_as_ServiceStat``."""
        name = self.registry.register_type(kind)
        schema = Schema.reference(name) if name else None
        short_kind = build_kind(kind).rsplit(":", 1)[-1]
        return self.body_param(schema, name=PARAM_NAME_BODY + AS_SEPARATOR + short_kind)

    def synthesize_body(self, params: list[RouteParameter], route: RouteDeclaration) -> Parameter:
        """Collapse several body parameters into one ad-hoc object schema.

        Swagger 2.0 cannot express an operation accepting one of several
        payload shapes, so every alternative becomes a string property of a
        single object. This loses the "one of" meaning.
        """
        properties = {}
        required = []
        for param in params:
            properties[param.name] = Schema(
                type="string",
                description=param.description or route.description,
                default=param.value,
            )
            if param.required:
                required.append(param.name)
        schema = Schema(type="object", properties=properties, required=required or None)
        return self.body_param(schema)

    def _body(self, params: list[RouteParameter], route: RouteDeclaration) -> Parameter | None:
        if len(params) == 1:
            param = params[0]
            schema = self.resolve_type(param.type) if param.type else None
            if schema is not None and schema.ref:
                body = self.body_param(schema)
                body.description = param.description or route.description
                body.required = param.required
                return body
        if params:
            return self.synthesize_body(params, route)
        if route.request_type:
            return self.body_param_for_type(route.request_type)
        return None

    # -- responses ------------------------------------------------------------

    def response_ok(self, schema: Schema | None = None) -> Response:
        return Response(description=DESCRIPTION_SUCCESS, schema_=schema)

    def response_no_content(self) -> Response:
        return Response(description=DESCRIPTION_ERROR)

    def response_error(self) -> Response:
        return Response(description=DESCRIPTION_ERROR, schema_=self.reference(ERROR_RESPONSE))

    def default_responses(self, response_type: str | None) -> dict[str, Response]:
        """200 with the declared response type, 404 with the generic error."""
        return {
            "200": self.response_ok(self.resolve_type(response_type)),
            "404": self.response_error(),
        }

    def response_param(self, param: RouteParameter) -> Response:
        return Response(description=param.description or "", schema_=self.resolve_type(param.type))

    # -- whole route ----------------------------------------------------------

    def classify(self, route: RouteDeclaration) -> ClassifiedRoute:
        result = ClassifiedRoute()
        body_params = []
        for param in route.parameters:
            if param.role == ParamRole.PATH:
                result.parameters.append(self.path_param(param))
            elif param.role == ParamRole.QUERY:
                result.parameters.append(self.query_param(param, route))
            elif param.role == ParamRole.BODY:
                body_params.append(param)
            elif param.role == ParamRole.RESPONSE:
                result.responses[param.name] = self.response_param(param)
            elif param.role == ParamRole.CONSUMES:
                result.consumes.append(param.name)
            elif param.role == ParamRole.PRODUCES:
                result.produces.append(param.name)

        body = self._body(body_params, route)
        if body is not None:
            result.parameters.append(body)
        return result
