import unittest

from fastapi import FastAPI, Query
from fastapi.testclient import TestClient

from app.core.http_errors import filter_error_to_http, install_filter_error_handlers
from app.schemas.pagination import PageRequest
from app.services.data_source import InMemoryDataSource
from app.services.document_search import DOCUMENT_SCHEMA, search_documents_paged
from app.services.filter_errors import FormatError, SchemaError
from app.services.filter_parser import parse_filter


def _build_app() -> FastAPI:
    app = FastAPI()
    install_filter_error_handlers(app)
    source = InMemoryDataSource([], DOCUMENT_SCHEMA)

    @app.get("/documents")
    def list_documents(filter: str | None = Query(default=None)):
        result = search_documents_paged(source, PageRequest(filter=filter))
        return {"total": result.total, "has_next_page": result.has_next_page}

    return app


class FilterErrorMappingTests(unittest.TestCase):
    def test_filter_error_becomes_bad_request(self):
        criterion = parse_filter("owner eq 'x'")[0]
        exc = filter_error_to_http(SchemaError('Property "owner" not found on Document', criterion))
        self.assertEqual(exc.status_code, 400)
        self.assertIn("owner", exc.detail)
        self.assertIn("filter:", exc.detail)

    def test_detail_without_criterion(self):
        exc = filter_error_to_http(FormatError("bad value"))
        self.assertEqual(exc.detail, "bad value")


class FilterErrorHandlerTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(_build_app())

    def test_valid_filter_succeeds(self):
        res = self.client.get("/documents", params={"filter": "status eq 'RECEIVED'"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"total": 0, "has_next_page": False})

    def test_unknown_property_is_400(self):
        res = self.client.get("/documents", params={"filter": "owner eq 'x'"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"], "SchemaError")

    def test_bad_literal_is_400(self):
        res = self.client.get("/documents", params={"filter": "size gt lots"})
        self.assertEqual(res.status_code, 400)
        body = res.json()
        self.assertEqual(body["error"], "FormatError")
        self.assertIn("size", body["detail"])

    def test_text_operator_on_enum_is_400(self):
        res = self.client.get("/documents", params={"filter": "status contains 'REC'"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"], "TypeMismatchError")


if __name__ == "__main__":
    unittest.main()
