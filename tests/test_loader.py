import json
from pathlib import Path

import pytest

from api_doc_assembler.errors import MetadataError
from api_doc_assembler.metadata.base import ParamRole, SupportLevel
from api_doc_assembler.metadata.loader import dump_batch, load_batch

FIXTURES = Path(__file__).parent / "fixtures"


class TestLoadBatch:
    def test_load_yaml_fixture(self):
        batch = load_batch(FIXTURES / "batch.yaml")
        assert batch.host == "localhost:8000"
        assert set(batch.resources) == {
            "/core/examples", "/core/management", "/core/node-selectors/default", "/core/broken",
        }
        assert batch.errors == {"/core/broken": "Service not found"}

    def test_wire_names_parsed(self):
        batch = load_batch(FIXTURES / "batch.yaml")
        examples = batch.resources["/core/examples"]
        doc = examples.first_document()
        assert doc.document_kind.endswith("ExampleServiceState")
        assert doc.document_description.property_descriptions["name"].required is True

        routes = batch.resources["/core/management"].document_description.routes()
        assert [r.action for r in routes] == ["PATCH", "PATCH", "GET", "GET"]
        assert routes[1].support_level is SupportLevel.DEPRECATED
        assert routes[1].parameters[0].role is ParamRole.BODY

    def test_load_json(self, tmp_path):
        f = tmp_path / "batch.json"
        f.write_text(json.dumps({"resources": {"/x": {"path": "/x"}}, "errors": {"/y": "boom"}}))
        batch = load_batch(f)
        assert list(batch.resources) == ["/x"]
        assert batch.errors == {"/y": "boom"}

    def test_invalid_yaml(self, tmp_path):
        f = tmp_path / "batch.yaml"
        f.write_text("resources: [unclosed\n")
        with pytest.raises(MetadataError):
            load_batch(f)

    def test_not_a_mapping(self, tmp_path):
        f = tmp_path / "batch.yaml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(MetadataError):
            load_batch(f)

    def test_invalid_content(self, tmp_path):
        f = tmp_path / "batch.yaml"
        f.write_text("resources:\n  /x:\n    documents: {}\n")  # path missing
        with pytest.raises(MetadataError):
            load_batch(f)


class TestDumpBatch:
    @pytest.mark.parametrize("filename", ["out/batch.yaml", "out/batch.json"])
    def test_dumped_batch_loads_back(self, tmp_path, filename):
        batch = load_batch(FIXTURES / "batch.yaml")
        target = tmp_path / filename
        dump_batch(batch, target)
        assert load_batch(target) == batch
