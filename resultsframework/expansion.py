"""
Expansion State Tracker.

Which nodes a view currently shows expanded. This is view state only:
it is keyed by node id, lives beside the framework, and is never
serialized with it. Ids of deleted nodes may linger; they are harmless
because nothing renders them.
"""

from __future__ import annotations

from typing import Any, Iterable

from .domain import ResultsFramework


def toggle(tracked: frozenset[str], node_id: str) -> frozenset[str]:
    """Flip membership of node_id."""
    if node_id in tracked:
        return tracked - {node_id}
    return tracked | {node_id}


def expand(tracked: frozenset[str], node_ids: Iterable[str]) -> frozenset[str]:
    return tracked | frozenset(node_ids)


def collapse(tracked: frozenset[str], node_ids: Iterable[str]) -> frozenset[str]:
    return tracked - frozenset(node_ids)


def expand_all(framework: ResultsFramework) -> frozenset[str]:
    """Every expandable node: objectives, outcomes and outputs."""
    ids = set()
    for objective in framework.objectives:
        ids.add(objective.id)
        for outcome in objective.outcomes:
            ids.add(outcome.id)
            ids.update(output.id for output in outcome.outputs)
    return frozenset(ids)


def prune(tracked: frozenset[str], framework: ResultsFramework) -> frozenset[str]:
    """Drop ids that no longer exist in the framework. Optional housekeeping."""
    return tracked & frozenset(framework.node_ids())


def from_legacy_flags(raw: Any) -> frozenset[str]:
    """
    Recover expansion state from old records that stored an isExpanded
    flag on each node. Only string ids with a truthy flag are kept.
    """
    found: set[str] = set()

    def visit(nodes: Any, children: tuple[str, ...]) -> None:
        if not isinstance(nodes, list):
            return
        for node in nodes:
            if not isinstance(node, dict):
                continue
            node_id = node.get("id")
            if node.get("isExpanded") and isinstance(node_id, str) and node_id:
                found.add(node_id)
            if children:
                visit(node.get(children[0]), children[1:])

    if isinstance(raw, dict):
        visit(raw.get("objectives"), ("outcomes", "outputs"))
    return frozenset(found)
