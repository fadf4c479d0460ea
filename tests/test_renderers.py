"""Tests for Mermaid and JSON renderers."""

import json

from apigraph.config import ApigraphConfig, LayoutDirection, ViewConfig
from apigraph.graph import GraphSession, JsonRenderer, MermaidRenderer, compile_document, graph_to_dict
from apigraph.graph.framework import METHOD_COLORS, PARAMETER_PATH_COLOR, SCHEMA_COLOR
from apigraph.graph.mermaid import top_level_of


def _expanded_view(document):
    session = GraphSession(ApigraphConfig(view=ViewConfig(collapse_top_level=False)))
    return session.load_document(document)


class TestMermaidRenderer:
    """Tests for Mermaid flowchart output."""

    def test_header_and_direction(self, users_document):
        view = _expanded_view(users_document)

        assert MermaidRenderer().render(view).startswith("flowchart LR")
        assert MermaidRenderer(direction=LayoutDirection.TOP_BOTTOM).render(view).startswith("flowchart TB")

    def test_nodes_and_edges(self, users_document):
        rendered = MermaidRenderer().render(_expanded_view(users_document))

        assert 'n0_users["/users -"]' in rendered
        assert 'n2_users__id["/:id -"]' in rendered
        assert 'n1_users_GET(["GET"])' in rendered
        assert 'n0_users -->|"GET"| n1_users_GET' in rendered
        assert "n0_users --> n2_users__id" in rendered

    def test_collapsed_marker(self, users_document):
        session = GraphSession()
        rendered = MermaidRenderer().render(session.load_document(users_document))

        assert 'n0_users["/users +"]' in rendered
        assert "%% Edges" not in rendered

    def test_schema_nodes_and_payload_edges(self, schema_document):
        rendered = MermaidRenderer().render(_expanded_view(schema_document))

        assert 'n2_schema_UserInput[("UserInput")]' in rendered
        assert 'n1_users_POST -.->|"Request Body"| n2_schema_UserInput' in rendered
        assert f"style n2_schema_UserInput fill:{SCHEMA_COLOR}" in rendered
        assert f"style n1_users_POST fill:{METHOD_COLORS['POST']}" in rendered

    def test_safe_ids_are_unique(self):
        doc = {"paths": {"/a/{b}": {"get": {}}, "/a/_b_": {"get": {}}}}
        rendered = MermaidRenderer().render(_expanded_view(doc))

        assert "n1_a__b" in rendered
        assert "n3_a__b" in rendered

    def test_clusters(self, petstore_document):
        rendered = MermaidRenderer(cluster_by_top_level=True).render(_expanded_view(petstore_document))

        assert 'subgraph cluster_0["/pets"]' in rendered
        assert 'subgraph cluster_1["/stores"]' in rendered
        assert 'subgraph cluster_2["/health"]' in rendered
        assert rendered.count("subgraph ") == 3

    def test_top_level_of(self):
        assert top_level_of("/users/{id}") == "/users"
        assert top_level_of("/") == "/"


class TestJsonRenderer:
    """Tests for JSON output."""

    def test_view_document(self, users_document):
        view = _expanded_view(users_document)
        data = json.loads(JsonRenderer().render(view))

        assert data["totals"] == {"nodes": 5, "edges": 4}
        assert [n["id"] for n in data["nodes"]] == [n.id for n in view.subgraph.nodes]

        users = data["nodes"][0]
        assert users["kind"] == "path_segment"
        assert users["hasChildren"] is True
        assert users["collapsed"] is False
        assert users["position"] == {"x": 0.0, "y": 40.0}

        param = data["nodes"][2]
        assert param["isParameter"] is True
        assert param["color"] == PARAMETER_PATH_COLOR

        delete = data["nodes"][4]
        assert delete["method"] == "DELETE"
        assert delete["pathId"] == "/users/{id}"

    def test_edges(self, schema_document):
        data = JsonRenderer().to_dict(_expanded_view(schema_document))

        produces = [e for e in data["edges"] if e["relation"] == "produces"]
        assert produces == [{
            "id": "produces:/users_GET->schema_UserInput",
            "source": "/users_GET",
            "target": "schema_UserInput",
            "relation": "produces",
            "label": "Response 200",
            "statusCodes": ["200"],
        }]

    def test_schema_properties(self, schema_document):
        data = JsonRenderer().to_dict(_expanded_view(schema_document))

        schema = next(n for n in data["nodes"] if n["kind"] == "payload_schema")
        assert schema["properties"][0] == {"name": "name", "type": "string"}

    def test_full_graph_dict(self, petstore_document):
        data = graph_to_dict(compile_document(petstore_document))

        assert len(data["nodes"]) == 16
        assert all("position" not in node and "collapsed" not in node for node in data["nodes"])
        assert data["issues"] == []
