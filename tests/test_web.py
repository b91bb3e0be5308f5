"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

from triplequery.config import EngineConfig
from triplequery.engine import QueryEngine
from triplequery.presets import PREFIXES
from triplequery.web import create_app


@pytest.fixture
def client():
    """Client over an app that has already loaded the bundled dataset."""
    app = create_app(config=EngineConfig(preload=True))
    return TestClient(app)


@pytest.fixture
def empty_client():
    """Client over an app that has not loaded any data."""
    app = create_app(config=EngineConfig(preload=False))
    return TestClient(app)


class TestInfo:
    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["name"] == "triplequery"

    def test_health_ready(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["data_state"] == "ready"
        assert data["facts"] == 70

    def test_health_not_loaded(self, empty_client):
        data = empty_client.get("/health").json()
        assert data["data_state"] == "uninitialized"
        assert data["facts"] == 0


class TestLoad:
    def test_load_bundled(self, empty_client):
        r = empty_client.post("/load")
        assert r.status_code == 200
        assert r.json() == {"facts_added": 70, "data_state": "ready"}

    def test_second_load_is_noop(self, client):
        r = client.post("/load")
        assert r.json()["facts_added"] == 0

    def test_load_inline_turtle(self, empty_client):
        r = empty_client.post("/load", json={"data": '<http://e.org/a> <http://e.org/p> "x" .'})
        assert r.json()["facts_added"] == 1

    @pytest.mark.parametrize("data", ["", "   \n"])
    def test_blank_data_loads_bundled(self, empty_client, data):
        r = empty_client.post("/load", json={"data": data})
        assert r.json() == {"facts_added": 70, "data_state": "ready"}

    def test_load_invalid_turtle(self, empty_client):
        r = empty_client.post("/load", json={"data": "not turtle at all"})
        assert r.status_code == 400
        assert r.json()["detail"].startswith("Load error")
        assert empty_client.get("/health").json()["data_state"] == "uninitialized"


class TestSPARQL:
    def test_query(self, client):
        r = client.post("/sparql", json={
            "query": PREFIXES + 'SELECT ?title WHERE { ?b :genre "Fantasy" ; :title ?title }',
        })
        assert r.status_code == 200
        data = r.json()
        assert data["variables"] == ["title"]
        assert data["results"] == [{"title": "The Hobbit"}]
        assert data["count"] == 1

    def test_query_before_load(self, empty_client):
        r = empty_client.post("/sparql", json={"query": "SELECT ?s WHERE { ?s ?p ?o }"})
        assert r.status_code == 503
        assert "Data not loaded" in r.json()["detail"]

    def test_syntax_error(self, client):
        r = client.post("/sparql", json={"query": "SELECT WHERE"})
        assert r.status_code == 400

    def test_unsupported_form(self, client):
        r = client.post("/sparql", json={"query": "ASK { ?s ?p ?o }"})
        assert r.status_code == 400
        assert "Only SELECT queries are supported" in r.json()["detail"]

    def test_unbound_filter_variable(self, client):
        r = client.post("/sparql", json={
            "query": PREFIXES + "SELECT ?t WHERE { ?b :title ?t FILTER(?nope < 3) }",
        })
        assert r.status_code == 400
        assert "?nope is unbound" in r.json()["detail"]

    def test_parse(self, client):
        r = client.post("/sparql/parse", json={
            "query": PREFIXES + "SELECT ?t WHERE { ?b :title ?t ; :publishedYear ?y FILTER(?y > 1) }",
        })
        assert r.status_code == 200
        data = r.json()
        assert data["type"] == "SELECT"
        assert data["variables"] == ["t"]
        assert data["pattern_count"] == 2
        assert data["filter_count"] == 1
        assert data["prefixes"][""] == "http://example.org/books/"

    def test_parse_error(self, empty_client):
        r = empty_client.post("/sparql/parse", json={"query": "SELECT ?s WHERE {"})
        assert r.status_code == 400


class TestPresets:
    def test_list(self, client):
        data = client.get("/presets").json()
        assert [p["id"] for p in data] == ["all-books", "sci-fi-books", "classic-books"]

    def test_list_by_category(self, client):
        data = client.get("/presets", params={"category": "Time Period"}).json()
        assert [p["id"] for p in data] == ["classic-books"]

    def test_categories(self, client):
        assert client.get("/presets/categories").json() == ["All", "General", "Genre", "Time Period"]

    def test_run(self, client):
        r = client.post("/presets/sci-fi-books/run")
        assert r.status_code == 200
        data = r.json()
        assert data["preset"]["id"] == "sci-fi-books"
        assert [row["title"] for row in data["results"]][0] == "Foundation"

    def test_run_unknown(self, client):
        assert client.post("/presets/nope/run").status_code == 404

    def test_run_before_load(self, empty_client):
        assert empty_client.post("/presets/all-books/run").status_code == 503


class TestValues:
    def test_values(self, client):
        r = client.get("/values", params={"predicate": "http://example.org/books/genre"})
        assert r.status_code == 200
        assert "Fantasy" in r.json()["values"]

    def test_values_before_load(self, empty_client):
        r = empty_client.get("/values", params={"predicate": "http://example.org/books/genre"})
        assert r.status_code == 503


def test_custom_engine_is_used():
    engine = QueryEngine(config=EngineConfig(preload=False))
    engine.load_data('<http://e.org/a> <http://e.org/p> "x" .')
    client = TestClient(create_app(engine=engine))
    assert client.get("/health").json()["facts"] == 1
