"""Tests for the visibility engine."""

import pytest

from apigraph.graph.compiler import compile_document
from apigraph.graph.models import NodeKind
from apigraph.graph.visibility import (
    CollapseState,
    ancestor_ids,
    collapse_all,
    compute_visible,
    expand_all,
    toggle_collapse,
)


def _ids(items):
    return [item.id for item in items]


def _assert_edge_closed(graph, subgraph):
    visible = subgraph.node_ids
    for edge in subgraph.edges:
        assert edge.source in visible and edge.target in visible
    expected = [e.id for e in graph.edges if e.source in visible and e.target in visible]
    assert _ids(subgraph.edges) == expected


class TestAncestorIds:
    """Tests for the ancestor walk."""

    def test_nearest_first(self):
        assert list(ancestor_ids("/users/{id}/posts")) == ["/users/{id}", "/users"]

    def test_top_level_has_no_ancestors(self):
        assert list(ancestor_ids("/users")) == []
        assert list(ancestor_ids("/")) == []

    def test_non_path_ids(self):
        assert list(ancestor_ids("schema_User")) == []

    def test_no_repeated_ids(self):
        ancestors = list(ancestor_ids("/a/b/c/d/e"))
        assert len(ancestors) == len(set(ancestors)) == 4


class TestCollapseState:
    """Tests for collapse state defaults."""

    def test_top_level_collapsed_by_default(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState()

        assert state.is_collapsed(graph.get_node("/users")) is True
        assert state.is_collapsed(graph.get_node("/users/{id}")) is False

    def test_operations_never_collapsed(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState(entries={"/users_GET": True})

        assert state.is_collapsed(graph.get_node("/users_GET")) is False

    def test_collapse_top_level_disabled(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState(collapse_top_level=False)

        assert state.is_collapsed(graph.get_node("/users")) is False

    def test_explicit_entry_wins(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState.from_mapping({"/users": False, "/users/{id}": True})

        assert state.is_collapsed(graph.get_node("/users")) is False
        assert state.is_collapsed(graph.get_node("/users/{id}")) is True


class TestScenarioB:
    """Default view of /users and /users/{id}."""

    def test_initial_view_shows_only_top_level(self, users_document):
        graph = compile_document(users_document)

        subgraph = compute_visible(graph, CollapseState())

        assert _ids(subgraph.nodes) == ["/users"]
        assert subgraph.edges == []

    def test_toggle_reveals_all_five_nodes(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState()

        assert toggle_collapse(state, graph, "/users") is True
        subgraph = compute_visible(graph, state)

        assert _ids(subgraph.nodes) == [
            "/users",
            "/users_GET",
            "/users/{id}",
            "/users/{id}_GET",
            "/users/{id}_DELETE",
        ]
        assert len(subgraph.edges) == 4


class TestVisibilityRules:
    """Tests for node and edge visibility rules."""

    def test_collapsed_node_itself_stays_visible(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState(entries={"/users": False, "/users/{id}": True})

        subgraph = compute_visible(graph, state)

        assert _ids(subgraph.nodes) == ["/users", "/users_GET", "/users/{id}"]

    def test_schema_visible_while_any_referencing_operation_visible(self, petstore_document):
        graph = compile_document(petstore_document)
        state = CollapseState(entries={"/pets": False, "/pets/{petId}": True})

        subgraph = compute_visible(graph, state)

        assert _ids(subgraph.nodes) == [
            "/pets",
            "/pets_GET",
            "schema_Pet",
            "/pets_POST",
            "schema_NewPet",
            "/pets/{petId}",
            "/stores",
            "/health",
        ]
        _assert_edge_closed(graph, subgraph)

    def test_shared_schema_from_other_subtree(self, petstore_document):
        graph = compile_document(petstore_document)
        state = CollapseState(entries={"/stores": False})

        subgraph = compute_visible(graph, state)

        assert "schema_Error" in subgraph
        assert "/pets/{petId}_GET" not in subgraph
        assert ("produces:/stores/{storeId}/inventory_GET->schema_Error") in subgraph.edge_ids
        _assert_edge_closed(graph, subgraph)

    def test_expand_all(self, petstore_document):
        graph = compile_document(petstore_document)
        state = CollapseState()
        expand_all(graph, state)

        subgraph = compute_visible(graph, state)

        assert len(subgraph) == len(graph.nodes)
        assert len(subgraph.edges) == len(graph.edges)

    def test_collapse_all(self, petstore_document):
        graph = compile_document(petstore_document)
        state = CollapseState()
        collapse_all(graph, state)

        subgraph = compute_visible(graph, state)

        assert _ids(subgraph.nodes) == ["/pets", "/stores", "/health"]

    def test_unknown_entries_ignored(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState(entries={"/orders": True, "/users": False, "schema_Gone": True})

        subgraph = compute_visible(graph, state)

        assert len(subgraph) == 5

    def test_state_not_mutated(self, petstore_document):
        graph = compile_document(petstore_document)
        state = CollapseState(entries={"/pets": False})

        compute_visible(graph, state)

        assert state.entries == {"/pets": False}

    def test_empty_graph(self):
        subgraph = compute_visible(compile_document({}), CollapseState())

        assert subgraph.nodes == []
        assert subgraph.edges == []


class TestToggle:
    """Tests for the toggle contract."""

    def test_toggle_operation_is_ignored(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState()

        assert toggle_collapse(state, graph, "/users_GET") is False
        assert state.entries == {}

    def test_toggle_unknown_id_is_ignored(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState()

        assert toggle_collapse(state, graph, "/nope") is False
        assert state.entries == {}

    def test_toggle_flips_one_entry(self, users_document):
        graph = compile_document(users_document)
        state = CollapseState()

        toggle_collapse(state, graph, "/users/{id}")

        assert state.entries == {"/users/{id}": True}


class TestProperties:
    """Properties that hold for every collapse state."""

    @pytest.fixture
    def states(self, petstore_document):
        graph = compile_document(petstore_document)
        path_ids = _ids(graph.nodes_of_kind(NodeKind.PATH_SEGMENT))
        states = [CollapseState(), CollapseState(collapse_top_level=False)]
        for path_id in path_ids:
            state = CollapseState(collapse_top_level=False)
            state.entries[path_id] = True
            states.append(state)
        return graph, states

    def test_edge_closure(self, states):
        graph, collapse_states = states
        for state in collapse_states:
            _assert_edge_closed(graph, compute_visible(graph, state))

    def test_visible_is_subgraph(self, states):
        graph, collapse_states = states
        all_nodes = set(_ids(graph.nodes))
        all_edges = set(_ids(graph.edges))
        for state in collapse_states:
            subgraph = compute_visible(graph, state)
            assert subgraph.node_ids <= all_nodes
            assert subgraph.edge_ids <= all_edges

    def test_collapse_monotonicity(self, petstore_document):
        graph = compile_document(petstore_document)
        for node in graph.nodes_of_kind(NodeKind.PATH_SEGMENT):
            state = CollapseState(collapse_top_level=False)
            before = compute_visible(graph, state)

            toggle_collapse(state, graph, node.id)
            after = compute_visible(graph, state)

            assert len(after) <= len(before)
            assert after.node_ids <= before.node_ids
            descendants = {n.id for n in graph.nodes if n.id.startswith(f"{node.id}/")}
            assert not descendants & after.node_ids

    def test_round_trip_toggle(self, petstore_document):
        graph = compile_document(petstore_document)
        for node in graph.nodes_of_kind(NodeKind.PATH_SEGMENT):
            state = CollapseState()
            original = compute_visible(graph, state)

            toggle_collapse(state, graph, node.id)
            toggle_collapse(state, graph, node.id)

            assert compute_visible(graph, state) == original
