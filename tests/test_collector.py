from unittest.mock import MagicMock, patch

import pytest
import requests

from api_doc_assembler.errors import MetadataError
from api_doc_assembler.metadata.collector import collect_metadata, list_links

BASE = "http://localhost:8000"

TEMPLATE = {
    "documentLinks": ["/pets/template-id"],
    "documents": {
        "/pets/template-id": {
            "documentKind": "com:example:Pet",
            "documentDescription": {"propertyDescriptions": {"name": {"typeName": "STRING"}}},
        },
    },
}


def _response(body=None, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = body
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return resp


def _session(routes: dict) -> MagicMock:
    """Session whose GET answers from ``routes`` (url -> response or exception)."""
    session = MagicMock()

    def get(url, **kwargs):
        answer = routes.get(url, _response(status=404))
        if isinstance(answer, Exception):
            raise answer
        return answer

    session.get.side_effect = get
    return session


class TestListLinks:
    def test_links_sorted(self):
        session = _session({f"{BASE}/": _response({"documentLinks": ["/b", "/a"]})})
        assert list_links(session, BASE) == ["/a", "/b"]

    def test_listing_failure(self):
        session = _session({f"{BASE}/": requests.ConnectionError("refused")})
        with pytest.raises(MetadataError):
            list_links(session, BASE)


class TestCollectMetadata:
    def test_collects_listed_services(self):
        session = _session({
            f"{BASE}/": _response({"documentLinks": ["/pets", "/owners"]}),
            f"{BASE}/pets/template": _response(TEMPLATE),
        })
        batch = collect_metadata(BASE + "/", session=session, max_workers=2)

        assert batch.host == "localhost:8000"
        assert list(batch.resources) == ["/pets"]
        assert batch.resources["/pets"].path == "/pets"
        assert batch.resources["/pets"].first_document().document_kind == "com:example:Pet"
        assert list(batch.errors) == ["/owners"]
        assert "404" in batch.errors["/owners"]

    def test_explicit_links_skip_listing(self):
        session = _session({f"{BASE}/pets/template": _response(TEMPLATE)})
        batch = collect_metadata(BASE, links=["/pets"], session=session)

        assert list(batch.resources) == ["/pets"]
        urls = [call.args[0] for call in session.get.call_args_list]
        assert urls == [f"{BASE}/pets/template"]

    def test_failures_recorded_per_resource(self):
        session = _session({
            f"{BASE}/a/template": requests.Timeout("timed out"),
            f"{BASE}/b/template": _response(["not", "a", "mapping"]),
            f"{BASE}/c/template": _response(TEMPLATE),
        })
        batch = collect_metadata(BASE, links=["/a", "/b", "/c"], session=session)

        assert list(batch.resources) == ["/c"]
        assert list(batch.errors) == ["/a", "/b"]
        assert batch.errors["/a"] == "timed out"

    def test_listing_failure_propagates(self):
        session = _session({f"{BASE}/": _response(status=500)})
        with pytest.raises(MetadataError):
            collect_metadata(BASE, session=session)

    @patch("api_doc_assembler.metadata.collector.requests.Session")
    def test_owned_session_closed(self, mock_session_cls):
        owned = mock_session_cls.return_value
        owned.__enter__.return_value = _session({f"{BASE}/pets/template": _response(TEMPLATE)})
        owned.__exit__.return_value = False

        batch = collect_metadata(BASE, links=["/pets"])

        assert list(batch.resources) == ["/pets"]
        owned.__exit__.assert_called_once()

    @patch("api_doc_assembler.metadata.collector.requests.Session")
    def test_caller_session_left_open(self, mock_session_cls):
        session = _session({f"{BASE}/pets/template": _response(TEMPLATE)})
        collect_metadata(BASE, links=["/pets"], session=session)

        mock_session_cls.assert_not_called()
        session.close.assert_not_called()
