"""Resource assembler: the paths documenting one resource.

A resource with template documents is a factory: it gets a collection
path, a ``/{id}`` instance path and, unless disabled, the utility paths
under both. A resource with only a route table documents exactly its
routes. Anything else is not documented.
"""

import logging

from pydantic import BaseModel

from api_doc_assembler.assembler.classifier import Classifier
from api_doc_assembler.assembler.document import Operation, Parameter, PathItem, Response, Schema, Tag
from api_doc_assembler.assembler.routes import RouteMerger
from api_doc_assembler.metadata import builtin
from api_doc_assembler.metadata.base import (
    TEMPLATE_SUFFIX,
    Action,
    DocumentDescription,
    ResourceMetadata,
    SupportLevel,
    TemplateDocument,
)

logger = logging.getLogger(__name__)

PREFIX_ID = "/{id}"

# Actions a declared route table may place on the instance path.
INSTANCE_ACTIONS = (Action.GET, Action.POST, Action.PUT, Action.PATCH, Action.DELETE)
STATS_SUFFIX = "/stats"
CONFIG_SUFFIX = "/config"
SUBSCRIPTIONS_SUFFIX = "/subscriptions"
AVAILABLE_SUFFIX = "/available"

# name, description, type, example, default
FACTORY_QUERY_PARAMS = [
    ("$filter", "OData filter expression", "string", None, None),
    ("$select", "Comma-separated list of fields to populate in query result", "string", None, None),
    ("$limit", "Set maximum number of documents to return in this query", "integer", "10", None),
    ("tenantLinks", "Comma-separated list", "string", None, None),
]


class AssembledResource(BaseModel):
    tag: Tag
    paths: dict[str, PathItem] = {}


def join_path(base: str, suffix: str) -> str:
    if base == "/" and suffix.startswith("/"):
        return suffix
    return base + suffix


def update_tag(tag: Tag, description: DocumentDescription | None) -> None:
    """Override the tag with the description's own name and text, when set."""
    if description is None:
        return
    if description.name and description.name.strip():
        tag.name = description.name
    if description.description and description.description.strip():
        tag.description = description.description


class ResourceAssembler:
    def __init__(
        self,
        classifier: Classifier,
        support_level: SupportLevel = SupportLevel.DEPRECATED,
        exclude_utilities: bool = False,
    ):
        self.classifier = classifier
        self.support_level = support_level
        self.exclude_utilities = exclude_utilities

    def assemble(self, meta: ResourceMetadata) -> AssembledResource | None:
        uri = meta.resource_path
        tag = Tag(name=uri)

        doc = meta.first_document()
        if doc is not None:
            update_tag(tag, doc.document_description)
            return AssembledResource(tag=tag, paths=self.factory_paths(uri, doc, tag.name))

        description = meta.document_description
        if description is not None and description.routes():
            update_tag(tag, description)
            merged = self._merger(tag.name).merge(description.routes())
            paths = {
                join_path(uri, suffix): item
                for suffix, item in merged.items()
                if not item.is_empty()
            }
            return AssembledResource(tag=tag, paths=paths)

        logger.debug("Resource %s has neither documents nor routes; skipping", uri)
        return None

    def _merger(self, tag: str) -> RouteMerger:
        return RouteMerger(self.classifier, tag, self.support_level)

    # -- factory --------------------------------------------------------------

    def factory_paths(self, uri: str, doc: TemplateDocument, tag: str) -> dict[str, PathItem]:
        doc_schema = Schema.reference(self.classifier.registry.register(doc.to_descriptor()))
        instance_uri = join_path(uri, PREFIX_ID)

        paths = {uri: PathItem(post=self._op_create(doc_schema, tag), get=self._op_list(tag))}
        if not self.exclude_utilities:
            paths.update(self.utility_paths(uri, tag, instance=False))

        paths[instance_uri] = self.instance_path(doc, doc_schema, tag)
        if not self.exclude_utilities:
            paths.update(self.utility_paths(instance_uri, tag, instance=True))
        return paths

    def _op_create(self, doc_schema: Schema, tag: str) -> Operation:
        return Operation(
            tags=[tag],
            description="Create service instance",
            parameters=[self.classifier.body_param(doc_schema)],
            responses={"200": self.classifier.response_ok(doc_schema)},
        )

    def _op_list(self, tag: str) -> Operation:
        params = [
            Parameter(
                name=name,
                location="query",
                description=description,
                type=type_,
                example=example,
                default=default,
                required=False,
            )
            for name, description, type_, example, default in FACTORY_QUERY_PARAMS
        ]
        return Operation(
            tags=[tag],
            description="Query service instances",
            parameters=params,
            responses={"200": self.classifier.response_ok(self._ref(builtin.QUERY_RESULT))},
        )

    def instance_path(self, doc: TemplateDocument, doc_schema: Schema, tag: str) -> PathItem:
        path = PathItem(parameters=[self.classifier.id_param()])
        routes = doc.document_description.routes() if doc.document_description else []
        if routes:
            merged = self._merger(tag).merge(routes)
            first = next(iter(merged.values()))
            for action in INSTANCE_ACTIONS:
                path.set_operation(action, first.operation(action))
            return path

        path.get = self._op_default(doc_schema, tag)
        for action in (Action.POST, Action.PUT, Action.PATCH, Action.DELETE):
            path.set_operation(
                action,
                self._op(
                    tag,
                    {"200": self.classifier.response_ok(doc_schema), "404": self.classifier.response_error()},
                    [self.classifier.body_param(doc_schema)],
                ),
            )
        return path

    # -- utilities ------------------------------------------------------------

    def utility_paths(self, base: str, tag: str, instance: bool) -> dict[str, PathItem]:
        return {
            join_path(base, STATS_SUFFIX): self._path_stats(tag, instance),
            join_path(base, CONFIG_SUFFIX): self._path_config(tag, instance),
            join_path(base, SUBSCRIPTIONS_SUFFIX): self._path_subscriptions(tag, instance),
            join_path(base, TEMPLATE_SUFFIX): self._path_template(tag, instance),
            join_path(base, AVAILABLE_SUFFIX): self._path_available(tag, instance),
        }

    def _utility_path(self, instance: bool) -> PathItem:
        return PathItem(parameters=[self.classifier.id_param()] if instance else None)

    def _path_stats(self, tag: str, instance: bool) -> PathItem:
        stats = self._ref(builtin.SERVICE_STATS)
        path = self._utility_path(instance)
        path.get = self._op(tag, self._ok_or_error(stats))
        path.put = self._op(
            tag,
            self._ok_or_error(stats),
            [
                self.classifier.named_body_param(builtin.SERVICE_STATS),
                self.classifier.named_body_param(builtin.SERVICE_STAT),
            ],
        )
        path.post = self._op(tag, self._ok_or_error(stats), [self._body(builtin.SERVICE_STAT)])
        path.patch = self._op(tag, self._ok_or_error(stats), [self._body(builtin.SERVICE_STAT)])
        return path

    def _path_config(self, tag: str, instance: bool) -> PathItem:
        config = self._ref(builtin.SERVICE_CONFIGURATION)
        path = self._utility_path(instance)
        path.get = self._op(tag, self._ok_or_error(config))
        path.patch = self._op(
            tag, self._ok_or_error(config), [self._body(builtin.CONFIG_UPDATE_REQUEST)]
        )
        return path

    def _path_subscriptions(self, tag: str, instance: bool) -> PathItem:
        state = self._ref(builtin.SUBSCRIPTION_STATE)
        path = self._utility_path(instance)
        path.get = self._op_default(state, tag)
        path.post = self._op(
            tag, {"200": self.classifier.response_ok(state)}, [self._body(builtin.SUBSCRIBER)]
        )
        path.delete = self._op(
            tag, {"200": self.classifier.response_ok(state)}, [self._body(builtin.SUBSCRIBER)]
        )
        return path

    def _path_template(self, tag: str, instance: bool) -> PathItem:
        path = self._utility_path(instance)
        kind = builtin.SERVICE_DOCUMENT if instance else builtin.QUERY_RESULT
        path.get = self._op_default(self._ref(kind), tag)
        return path

    def _path_available(self, tag: str, instance: bool) -> PathItem:
        path = self._utility_path(instance)
        path.get = self._op(
            tag,
            {
                "200": self.classifier.response_ok(),
                "503": self.classifier.response_no_content(),
                "404": self.classifier.response_error(),
            },
        )
        stats = self._ref(builtin.SERVICE_STATS)
        path.put = self._op(tag, self._ok_or_error(stats), [self._body(builtin.SERVICE_STAT)])
        path.patch = self._op(tag, self._ok_or_error(stats), [self._body(builtin.SERVICE_STAT)])
        return path

    # -- helpers --------------------------------------------------------------

    def _ref(self, kind: str) -> Schema | None:
        return self.classifier.reference(kind)

    def _body(self, kind: str) -> Parameter:
        return self.classifier.body_param(self._ref(kind))

    def _ok_or_error(self, schema: Schema | None) -> dict[str, Response]:
        return {"200": self.classifier.response_ok(schema), "404": self.classifier.response_error()}

    def _op(
        self,
        tag: str,
        responses: dict[str, Response],
        parameters: list[Parameter] | None = None,
    ) -> Operation:
        return Operation(tags=[tag], parameters=parameters, responses=responses)

    def _op_default(self, schema: Schema | None, tag: str) -> Operation:
        return self._op(tag, self._ok_or_error(schema))
