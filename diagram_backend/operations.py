"""
Batch operations on diagram files.

Each operation is one load / mutate / save cycle on a single file. If any
item of a batch fails, the exception propagates and nothing is written,
so a batch is applied completely or not at all.

Items may be passed as request models or plain dicts (validated here).
"""

import logging
from typing import Any, Iterable, Mapping, Type, TypeVar, Union

from pydantic import BaseModel

from diagram_core.analysis import summarize_diagram
from diagram_core.editor import DiagramEditor
from diagram_core.layout import validate_layout
from diagram_core.models import EdgeSpec, LayoutSpec, NodeEdit, NodeSpec
from diagram_core.validation import validate_diagram, validation_summary

from .file_manager import DiagramFileManager, file_manager


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], item: Union[M, Mapping[str, Any]]) -> M:
    return item if isinstance(item, model) else model.model_validate(item)


def create_diagram(file_path: str, manager: DiagramFileManager = file_manager) -> dict:
    """Write an empty diagram, replacing whatever the file held."""
    path = manager.save(DiagramEditor(), file_path)
    return {"success": True, "file_path": str(path)}


def add_nodes(
    file_path: str,
    nodes: Iterable[Union[NodeSpec, Mapping[str, Any]]],
    layout: Union[LayoutSpec, Mapping[str, Any], None] = None,
    manager: DiagramFileManager = file_manager,
) -> dict:
    """
    Add a batch of nodes, then optionally lay out the top-level nodes once.

    The layout request is checked before anything is added.
    """
    specs = [_coerce(NodeSpec, n) for n in nodes]
    layout_spec = _coerce(LayoutSpec, layout) if layout is not None else None
    if layout_spec is not None:
        validate_layout(layout_spec.algorithm, layout_spec.options)

    path = manager.resolve_path(file_path)
    with manager.edit(path) as editor:
        added = [
            editor.add_node(
                spec.id,
                title=spec.title,
                kind=spec.kind,
                x=spec.x,
                y=spec.y,
                parent=spec.parent,
                width=spec.width,
                height=spec.height,
                corner_radius=spec.corner_radius,
                overrides=spec,
            )
            for spec in specs
        ]
        if layout_spec is not None:
            editor.apply_layout(layout_spec.algorithm, layout_spec.options)

    logger.info("Added %d nodes to %s", len(added), path)
    result = {"success": True, "file_path": str(path), "added": added}
    if layout_spec is not None:
        result["layout"] = layout_spec.algorithm
    return result


def edit_nodes(
    file_path: str,
    nodes: Iterable[Union[NodeEdit, Mapping[str, Any]]],
    manager: DiagramFileManager = file_manager,
) -> dict:
    """Apply partial updates to existing nodes or edges."""
    edits = [_coerce(NodeEdit, n) for n in nodes]

    path = manager.resolve_path(file_path)
    with manager.edit(path) as editor:
        for edit in edits:
            editor.edit_node(
                edit.id,
                title=edit.title,
                kind=edit.kind,
                x=edit.x,
                y=edit.y,
                width=edit.width,
                height=edit.height,
                corner_radius=edit.corner_radius,
                overrides=edit,
            )

    logger.info("Edited %d cells in %s", len(edits), path)
    return {"success": True, "file_path": str(path), "edited": [e.id for e in edits]}


def link_nodes(
    file_path: str,
    edges: Iterable[Union[EdgeSpec, Mapping[str, Any]]],
    manager: DiagramFileManager = file_manager,
) -> dict:
    """Create or update edges between existing nodes."""
    specs = [_coerce(EdgeSpec, e) for e in edges]

    path = manager.resolve_path(file_path)
    with manager.edit(path) as editor:
        linked = [
            editor.link_nodes(
                spec.source,
                spec.target,
                title=spec.title,
                style=spec.style_keys(),
                undirected=spec.undirected,
                waypoints=spec.waypoints,
                edge_style=spec.edge_style,
            )
            for spec in specs
        ]

    logger.info("Linked %d edges in %s", len(linked), path)
    return {"success": True, "file_path": str(path), "edges": linked}


def remove_nodes(
    file_path: str,
    ids: Iterable[str],
    manager: DiagramFileManager = file_manager,
) -> dict:
    """
    Remove nodes and edges by id.

    Node removal cascades to child nodes and attached edges; those ids are
    reported in `removed` too. Ids that matched nothing are listed in
    `missing`.
    """
    ids = list(ids)

    path = manager.resolve_path(file_path)
    with manager.edit(path) as editor:
        removed = editor.remove_nodes(ids)

    missing = [cell_id for cell_id in ids if cell_id not in removed]
    if missing:
        logger.warning("Ids not found in %s: %s", path, ", ".join(missing))
    return {"success": True, "file_path": str(path), "removed": removed, "missing": missing}


def inspect_diagram(
    file_path: str,
    top_n: int = 5,
    manager: DiagramFileManager = file_manager,
) -> dict:
    """Report the diagram contents, a structural summary and validation issues."""
    path = manager.resolve_path(file_path)
    editor = manager.load(path)
    diagram = editor.diagram
    issues = validate_diagram(diagram)

    return {
        "success": True,
        "file_path": str(path),
        "exists": path.exists(),
        "diagram": editor.to_json_dict(),
        "summary": summarize_diagram(diagram, top_n=top_n).to_dict(),
        "validation": validation_summary(issues),
        "issues": [issue.to_dict() for issue in issues],
    }
