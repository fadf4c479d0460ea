"""Graph compiler turning a decoded API description into a node/edge graph.

The compiler is a pure function of its input document: identical documents
always produce identical node and edge sequences (same ids, same order).
Order follows first encounter while walking ``paths``: outer loop by path,
inner loop by method.

Fragments the compiler cannot understand are skipped and recorded as
compile issues rather than aborting the whole document.
"""

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..config import CompilerConfig, HttpMethod
from ..diagnostics import IssueCollector, IssueKind
from .models import (
    CompiledGraph,
    EdgeRelation,
    GraphEdge,
    GraphNode,
    OperationNode,
    PathSegmentNode,
    PayloadSchemaNode,
    SchemaProperty,
)

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset(m.value.lower() for m in HttpMethod)
SCHEMA_NODE_PREFIX = "schema_"
ROOT_PATH_ID = "/"


def split_path(path: str) -> list[str]:
    """Split a path string into its non-empty segments."""
    return [segment for segment in path.split("/") if segment]


def path_prefixes(path: str) -> list[str]:
    """Every ancestor path of ``path``, shortest first, ending with the path itself.

    ``/users/{id}`` yields ``["/users", "/users/{id}"]``; a path without
    segments maps to the root node ``/``.
    """
    segments = split_path(path)
    if not segments:
        return [ROOT_PATH_ID]

    prefixes = []
    prefix = ""
    for segment in segments:
        prefix = f"{prefix}/{segment}"
        prefixes.append(prefix)
    return prefixes


def is_parameter_segment(segment: str) -> bool:
    """Whether a segment is a templated parameter such as ``{id}``."""
    return len(segment) >= 2 and segment.startswith("{") and segment.endswith("}")


def pointer_token(key: Any) -> str:
    """Escape a mapping key for use as a JSON pointer reference token."""
    return str(key).replace("~", "~0").replace("/", "~1")


def operation_id(path_id: str, method: str) -> str:
    return f"{path_id}_{method.upper()}"


def schema_node_id(schema_name: str) -> str:
    return f"{SCHEMA_NODE_PREFIX}{schema_name}"


def schema_name_from_ref(ref: Any) -> str | None:
    """Extract the schema name from a ``$ref`` string (last path segment)."""
    if not isinstance(ref, str) or not ref:
        return None
    name = ref.rsplit("/", 1)[-1]
    return name or None


def describe_schema(schema_name: str, schema: Any) -> tuple[tuple[SchemaProperty, ...], str]:
    """Build the property list and tooltip text for a schema definition."""
    properties: list[SchemaProperty] = []
    raw_properties = schema.get("properties") if isinstance(schema, Mapping) else None

    if isinstance(raw_properties, Mapping):
        for prop_name, prop_schema in raw_properties.items():
            prop_type = None
            if isinstance(prop_schema, Mapping):
                prop_type = prop_schema.get("type")
                if prop_type is None and "$ref" in prop_schema:
                    prop_type = schema_name_from_ref(prop_schema["$ref"])
            if isinstance(prop_type, list):
                prop_type = " | ".join(str(t) for t in prop_type)
            properties.append(SchemaProperty(name=str(prop_name), type=str(prop_type or "unknown")))

    if properties:
        body = "Properties:\n" + "\n".join(f"- {p.name}: {p.type}" for p in properties)
    else:
        body = "No properties"

    return tuple(properties), f"Schema: {schema_name}\n{body}"


class GraphCompiler:
    """Compiles decoded API description documents into graphs."""

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()

    def compile(self, doc: Mapping[str, Any]) -> CompiledGraph:
        """Compile a decoded document into a graph.

        Args:
            doc: Decoded API description (never mutated)

        Returns:
            CompiledGraph with nodes, edges and the issues met on the way
        """
        return _CompileRun(doc, self.config).run()


def compile_document(doc: Mapping[str, Any], config: CompilerConfig | None = None) -> CompiledGraph:
    """Compile a decoded document with the given (or default) compiler config."""
    return GraphCompiler(config).compile(doc)


class _CompileRun:
    """State of a single compilation."""

    def __init__(self, doc: Mapping[str, Any], config: CompilerConfig):
        self.doc = doc if isinstance(doc, Mapping) else {}
        self.config = config
        self.methods = config.method_names
        self.collector = IssueCollector()
        self.nodes: dict[str, GraphNode] = {}
        self.edges: dict[str, GraphEdge] = {}
        self.schema_ids: dict[str, str] = {}  # schema name -> node id
        self.schemas = self._load_schemas()
        self.reserved: set[str] = set()  # Path segment ids, claimed before any operation

    def run(self) -> CompiledGraph:
        paths = self.doc.get("paths")
        if paths is None:
            paths = {}
        elif not isinstance(paths, Mapping):
            self.collector.warn(IssueKind.MALFORMED_PATH_ITEM, "'paths' is not a mapping", "#/paths")
            paths = {}

        for path in paths:
            self.reserved.update(path_prefixes(str(path)))

        for path, path_item in paths.items():
            self._compile_path(str(path), path_item)

        nodes = self._with_derived_attributes(list(self.nodes.values()))
        graph = CompiledGraph(nodes=nodes, edges=list(self.edges.values()), issues=self.collector.issues)

        logger.info(
            f"Compiled graph with {len(graph.nodes)} nodes and {len(graph.edges)} edges "
            f"({len(graph.issues)} issues)"
        )
        if graph.is_empty:
            logger.warning("Document defines no paths; the graph is empty")
        if self.collector.has_warnings():
            logger.warning("Some document fragments were skipped; run `apigraph check` for details")
        return graph

    def _load_schemas(self) -> Mapping[str, Any]:
        components = self.doc.get("components")
        if components is None:
            return {}
        if not isinstance(components, Mapping):
            self.collector.warn(IssueKind.MALFORMED_COMPONENTS, "'components' is not a mapping", "#/components")
            return {}
        schemas = components.get("schemas")
        if schemas is None:
            return {}
        if not isinstance(schemas, Mapping):
            self.collector.warn(
                IssueKind.MALFORMED_COMPONENTS, "'components.schemas' is not a mapping", "#/components/schemas"
            )
            return {}
        return schemas

    def _is_taken(self, node_id: str) -> bool:
        return node_id in self.nodes or node_id in self.reserved

    def _claim_id(self, candidate: str) -> str:
        """Return ``candidate`` or a suffixed variant not used by any node or path prefix."""
        if not self._is_taken(candidate):
            return candidate
        suffix = 2
        while self._is_taken(f"{candidate}~{suffix}"):
            suffix += 1
        claimed = f"{candidate}~{suffix}"
        self.collector.warn(IssueKind.DUPLICATE_ID, f"Id '{candidate}' already used, renamed to '{claimed}'", candidate)
        return claimed

    def _add_edge(self, source: str, target: str, relation: EdgeRelation, label: str | None = None,
                  status_code: str | None = None) -> None:
        edge_id = GraphEdge.make_id(source, target, relation)
        existing = self.edges.get(edge_id)

        if existing is None:
            status_codes = (status_code,) if status_code is not None else ()
            self.edges[edge_id] = GraphEdge(
                id=edge_id,
                source=source,
                target=target,
                relation=relation,
                label=_response_label(status_codes) if status_codes else label,
                status_codes=status_codes,
            )
        elif status_code is not None and status_code not in existing.status_codes:
            status_codes = existing.status_codes + (status_code,)
            self.edges[edge_id] = replace(existing, status_codes=status_codes, label=_response_label(status_codes))

    def _compile_path(self, path: str, path_item: Any) -> None:
        location = f"#/paths/{pointer_token(path)}"
        path_id = self._ensure_path_nodes(path)

        if not isinstance(path_item, Mapping):
            self.collector.warn(IssueKind.MALFORMED_PATH_ITEM, f"Path item for '{path}' is not a mapping", location)
            return

        for key, operation in path_item.items():
            method = str(key).lower()
            key_location = f"{location}/{pointer_token(key)}"
            if method not in HTTP_METHODS:
                self.collector.info(IssueKind.IGNORED_KEY, f"'{key}' is not an HTTP method", key_location)
                continue
            if method.upper() not in self.methods:
                continue
            self._compile_operation(path_id, method.upper(), operation, key_location)

    def _ensure_path_nodes(self, path: str) -> str:
        """Create the segment node of every prefix of ``path``; return the full-path node id."""
        segments = split_path(path)

        if not segments:
            return self._ensure_segment(ROOT_PATH_ID, ROOT_PATH_ID, "", depth=1, parent_id=None)

        node_id = None
        for depth, (prefix, segment) in enumerate(zip(path_prefixes(path), segments), start=1):
            node_id = self._ensure_segment(prefix, f"/{segment}", segment, depth, node_id)
        return node_id

    def _ensure_segment(self, node_id: str, label: str, segment: str, depth: int, parent_id: str | None) -> str:
        if node_id not in self.nodes:
            self.nodes[node_id] = PathSegmentNode(
                id=node_id,
                label=label,
                tooltip_text=f"Path: {node_id}",
                segment=segment,
                depth=depth,
                is_parameter=is_parameter_segment(segment),
            )

        if parent_id is not None:
            self._add_edge(parent_id, node_id, EdgeRelation.PARENT_CHILD)
        return node_id

    def _compile_operation(self, path_id: str, method: str, operation: Any, location: str) -> None:
        if isinstance(operation, Mapping):
            summary = str(operation.get("summary") or "")
            description = str(operation.get("description") or "")
        else:
            self.collector.warn(IssueKind.MALFORMED_OPERATION, f"{method} operation is not a mapping", location)
            summary = description = ""

        op_id = self._claim_id(operation_id(path_id, method))
        self.nodes[op_id] = OperationNode(
            id=op_id,
            label=method,
            tooltip_text=f"Method: {method}\n{summary}\n{description}",
            path_id=path_id,
            method=method,
            summary=summary,
            description=description,
        )
        self._add_edge(path_id, op_id, EdgeRelation.INVOKES, label=method)

        if not isinstance(operation, Mapping) or not self.config.include_schemas:
            return

        request_body = operation.get("requestBody")
        if isinstance(request_body, Mapping):
            for ref, ref_location in self._content_refs(request_body, f"{location}/requestBody"):
                schema_id = self._resolve_schema(ref, ref_location)
                if schema_id:
                    self._add_edge(op_id, schema_id, EdgeRelation.CONSUMES, label="Request Body")

        responses = operation.get("responses")
        if isinstance(responses, Mapping):
            for status_code, response in responses.items():
                if not isinstance(response, Mapping):
                    continue
                response_location = f"{location}/responses/{pointer_token(status_code)}"
                for ref, ref_location in self._content_refs(response, response_location):
                    schema_id = self._resolve_schema(ref, ref_location)
                    if schema_id:
                        self._add_edge(op_id, schema_id, EdgeRelation.PRODUCES, status_code=str(status_code))

    def _content_refs(self, holder: Mapping[str, Any], location: str) -> list[tuple[Any, str]]:
        """Collect ``$ref`` values of every media type under ``holder['content']``."""
        content = holder.get("content")
        if not isinstance(content, Mapping):
            return []

        refs = []
        for media_type, media in content.items():
            if not isinstance(media, Mapping):
                continue
            schema = media.get("schema")
            if not isinstance(schema, Mapping):
                continue
            media_location = f"{location}/content/{pointer_token(media_type)}/schema"
            if "$ref" in schema:
                refs.append((schema["$ref"], media_location))
            elif schema.get("type") == "array" and isinstance(schema.get("items"), Mapping):
                items = schema["items"]
                if "$ref" in items:
                    refs.append((items["$ref"], f"{media_location}/items"))
        return refs

    def _resolve_schema(self, ref: Any, location: str) -> str | None:
        """Resolve a reference to a schema node id, creating the node on first use."""
        schema_name = schema_name_from_ref(ref)
        if schema_name is None or schema_name not in self.schemas:
            self.collector.warn(IssueKind.UNRESOLVED_REFERENCE, f"Reference {ref!r} does not name a known schema", location)
            return None

        node_id = self.schema_ids.get(schema_name)
        if node_id is None:
            node_id = self._claim_id(schema_node_id(schema_name))
            properties, tooltip = describe_schema(schema_name, self.schemas[schema_name])
            self.nodes[node_id] = PayloadSchemaNode(
                id=node_id,
                label=schema_name,
                tooltip_text=tooltip,
                schema_name=schema_name,
                properties=properties,
            )
            self.schema_ids[schema_name] = node_id
        return node_id

    def _with_derived_attributes(self, nodes: list[GraphNode]) -> list[GraphNode]:
        """Fill ``has_children`` and ``operation_count`` on path segment nodes."""
        operation_counts: dict[str, int] = {}
        for node in nodes:
            if isinstance(node, OperationNode):
                operation_counts[node.path_id] = operation_counts.get(node.path_id, 0) + 1

        result: list[GraphNode] = []
        for node in nodes:
            if isinstance(node, PathSegmentNode):
                node = replace(
                    node,
                    has_children=has_descendant_id(node.id, nodes),
                    operation_count=operation_counts.get(node.id, 0),
                )
            result.append(node)
        return result


def has_descendant_id(node_id: str, nodes: list[GraphNode]) -> bool:
    """True iff another node's id is a strict ``/``-delimited extension of ``node_id``."""
    prefix = f"{node_id}/"
    return any(other.id != node_id and other.id.startswith(prefix) for other in nodes)


def _response_label(status_codes: tuple[str, ...]) -> str:
    return f"Response {', '.join(status_codes)}"
