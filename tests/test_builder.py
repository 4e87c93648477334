import pytest

from api_doc_assembler.assembler.builder import DocumentAssembler, assemble_document
from api_doc_assembler.assembler.document import Info
from api_doc_assembler.config import AssemblerConfig
from api_doc_assembler.encoder import encode_document
from api_doc_assembler.errors import UnknownActionError
from api_doc_assembler.metadata.base import (
    BatchResult,
    DocumentDescription,
    ParamRole,
    PropertyDescription,
    PropertyType,
    ResourceMetadata,
    RouteDeclaration,
    RouteParameter,
    SchemaDescriptor,
    SupportLevel,
    TemplateDocument,
)


def _factory(path: str, kind: str = "com:example:Pet", **description) -> ResourceMetadata:
    description.setdefault(
        "property_descriptions", {"name": PropertyDescription(type_name=PropertyType.STRING)}
    )
    doc = TemplateDocument(document_kind=kind, document_description=DocumentDescription(**description))
    return ResourceMetadata(path=path, documents={f"{path}/1": doc})


def _batch(*metas: ResourceMetadata, errors: dict[str, str] | None = None, **kwargs) -> BatchResult:
    return BatchResult(resources={m.path: m for m in metas}, errors=errors or {}, **kwargs)


def _refs(node) -> list[str]:
    found = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref":
                found.append(value)
            else:
                found.extend(_refs(value))
    elif isinstance(node, list):
        for item in node:
            found.extend(_refs(item))
    return found


class TestDocumentFields:
    def test_document_wide_fields(self):
        config = AssemblerConfig(info=Info(title="Pets", version="2.0"), base_path="/api")
        doc = assemble_document(_batch(_factory("/x"), host="h:8000"), config)
        data = doc.to_dict()
        assert data["swagger"] == "2.0"
        assert data["info"] == {"title": "Pets", "version": "2.0"}
        assert data["host"] == "h:8000"
        assert data["basePath"] == "/api"
        assert data["consumes"] == ["application/json"]
        assert data["produces"] == ["application/json"]

    def test_configured_host_wins(self):
        doc = assemble_document(_batch(host="h:8000"), AssemblerConfig(host="public:443"))
        assert doc.host == "public:443"

    def test_empty_batch(self):
        doc = assemble_document(BatchResult())
        assert doc.paths == {}
        assert doc.tags == []
        assert doc.definitions == {}

    def test_every_reference_resolves(self):
        doc = assemble_document(_batch(_factory("/x"), _factory("/y", kind="com:example:Owner")))
        data = doc.to_dict()
        refs = _refs(data["paths"]) + _refs(data["definitions"])
        assert refs
        for ref in refs:
            assert ref.removeprefix("#/definitions/") in data["definitions"]

    def test_strip_prefix_applied_to_definitions(self):
        doc = assemble_document(_batch(_factory("/x")), AssemblerConfig(strip_prefixes=["com.example"]))
        assert "Pet" in doc.definitions
        assert doc.paths["/x"].post.parameters[0].schema_.ref == "#/definitions/Pet"


class TestResourceSelection:
    def test_failed_resources_never_appear(self):
        doc = assemble_document(_batch(_factory("/x"), _factory("/y"), errors={"/y": "timeout"}))
        assert not [p for p in doc.paths if p.startswith("/y")]
        assert [t.name for t in doc.tags] == ["/x"]

    def test_errors_without_metadata_ignored(self):
        doc = assemble_document(_batch(_factory("/x"), errors={"/z": "refused"}))
        assert [t.name for t in doc.tags] == ["/x"]

    @pytest.mark.parametrize("path", [
        "/core/node-selectors/default",
        "/core/ui/default",
        "/user-interface/resources/app",
    ])
    def test_internal_paths_always_excluded(self, path):
        doc = assemble_document(_batch(_factory(path)))
        assert doc.paths == {}

    def test_configured_exclusions(self):
        config = AssemblerConfig(excluded_prefixes=["/private"], self_link="/discovery/swagger")
        doc = assemble_document(
            _batch(_factory("/private/x"), _factory("/discovery/swagger"), _factory("/x")),
            config,
        )
        assert [t.name for t in doc.tags] == ["/x"]

    def test_skipped_resource_has_no_tag(self):
        doc = assemble_document(_batch(_factory("/x"), ResourceMetadata(path="/bare")))
        assert [t.name for t in doc.tags] == ["/x"]

    def test_identical_tags_added_once(self):
        doc = assemble_document(_batch(
            _factory("/a", name="Pets"),
            _factory("/b", name="Pets"),
        ))
        assert [t.name for t in doc.tags] == ["Pets"]

    def test_tag_names_unique_when_descriptions_differ(self):
        doc = assemble_document(_batch(
            _factory("/a", name="Pets", description="first"),
            _factory("/b", name="Pets", description="second"),
        ))
        assert [(t.name, t.description) for t in doc.tags] == [("Pets", "first")]
        assert doc.paths["/b"].post.tags == ["Pets"]


class TestDeterminism:
    def test_retrieval_order_does_not_matter(self):
        metas = [_factory("/c"), _factory("/a", kind="com:example:A"), _factory("/b", kind="com:example:B")]
        forward = assemble_document(_batch(*metas))
        backward = assemble_document(_batch(*reversed(metas)))

        assert encode_document(forward) == encode_document(backward)
        assert encode_document(forward, "yaml") == encode_document(backward, "yaml")
        assert [t.name for t in forward.tags] == ["/a", "/b", "/c"]

    def test_sorted_by_normalized_path(self):
        batch = BatchResult(resources={
            "first": _factory("/b/template"),
            "second": _factory("/a/template"),
        })
        doc = assemble_document(batch)
        assert [t.name for t in doc.tags] == ["/a", "/b"]

    def test_runs_share_no_state(self):
        assembler = DocumentAssembler()
        batch = _batch(_factory("/x"))
        first = assembler.assemble(batch)
        second = assembler.assemble(batch)

        assert first.to_dict() == second.to_dict()
        assert first.definitions["com.example.Pet"] is not second.definitions["com.example.Pet"]


class TestScenarios:
    def test_dotted_batch_schema_resolves_for_routes(self):
        meta = ResourceMetadata(
            path="/owners",
            document_description=DocumentDescription(service_request_routes={
                "GET": [RouteDeclaration(action="GET", response_type="com.example.Owner")],
            }),
        )
        batch = _batch(meta, schemas={"com.example.Owner": SchemaDescriptor(kind="com.example.Owner")})
        doc = assemble_document(batch)

        assert doc.paths["/owners"].get.responses["200"].schema_.ref == "#/definitions/com.example.Owner"
        assert "com.example.Owner" in doc.definitions

    def test_factory_with_utilities(self):
        doc = assemble_document(_batch(_factory("/x")))
        utilities = ["/stats", "/config", "/subscriptions", "/template", "/available"]
        expected = {"/x", "/x/{id}"}
        expected |= {"/x" + s for s in utilities}
        expected |= {"/x/{id}" + s for s in utilities}

        assert set(doc.paths) == expected
        assert len(doc.paths) == 12
        assert sorted(doc.paths["/x"].methods()) == ["GET", "POST"]
        assert sorted(doc.paths["/x/{id}"].methods()) == ["DELETE", "GET", "PATCH", "POST", "PUT"]

    def test_factory_without_utilities(self):
        doc = assemble_document(_batch(_factory("/x")), AssemblerConfig(exclude_utilities=True))
        assert list(doc.paths) == ["/x", "/x/{id}"]

    def test_deprecated_route_dropped_at_supported_threshold(self):
        routes = [
            RouteDeclaration(
                action="POST",
                support_level=SupportLevel.SUPPORTED,
                parameters=[RouteParameter(name="keep", role=ParamRole.QUERY)],
            ),
            RouteDeclaration(
                action="POST",
                support_level=SupportLevel.DEPRECATED,
                parameters=[RouteParameter(name="drop", role=ParamRole.QUERY)],
            ),
        ]
        meta = ResourceMetadata(
            path="/x",
            document_description=DocumentDescription(service_request_routes={"POST": routes}),
        )
        config = AssemblerConfig(support_level=SupportLevel.SUPPORTED)
        doc = assemble_document(_batch(meta), config)

        assert list(doc.paths) == ["/x"]
        assert [p.name for p in doc.paths["/x"].post.parameters] == ["keep"]
        assert doc.paths["/x"].post.deprecated is None

    def test_unknown_action_fails_whole_document(self):
        meta = ResourceMetadata(
            path="/bad",
            document_description=DocumentDescription(service_request_routes={
                "TRACE": [RouteDeclaration(action="TRACE")],
            }),
        )
        with pytest.raises(UnknownActionError):
            assemble_document(_batch(_factory("/x"), meta))
