"""
Tree Mutation Engine.

One operation per (level, verb). Every operation is total: a missing id,
an out-of-range index or a full collection leaves the framework exactly
as it was and the same object is returned.

Two flavours of each operation:

    try_add_objective(...) -> MutationResult   (tree + status + new id)
    add_objective(...)     -> ResultsFramework (tree only)

Internally a miss raises MutationRejected deep in the path walk; the
top of each operation turns it back into a no-op result. The exception
never leaves this module.

Path resolution: objective by id -> outcome by id -> output by id,
linear scans at each step.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, TypeVar, Union

import structlog

from .bounded import try_append
from .config import MAX_CHILDREN, MAX_DURATION, MIN_DURATION
from .domain import (
    Indicator,
    IndicatorLevel,
    Objective,
    Outcome,
    Output,
    ResultsFramework,
    create_indicator,
    create_objective,
    create_outcome,
    create_output,
)
from .fields import FieldTarget, apply_field
from .identity import IdSource

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# An indicator is addressed by its id or by its position in the owning list
IndicatorRef = Union[str, int]


# =============================================================================
# RESULT TYPES
# =============================================================================

class MutationStatus(Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of one mutation.

    framework is the new tree when applied, otherwise the input tree
    itself. node_id is set for adds (the freshly minted id) and for
    operations that target a single node.
    """
    framework: ResultsFramework
    status: MutationStatus
    node_id: Optional[str] = None
    reason: str = ""

    @property
    def applied(self) -> bool:
        return self.status is MutationStatus.APPLIED


class MutationRejected(Exception):
    """Internal signal that an operation must become a no-op."""

    def __init__(self, status: MutationStatus, reason: str):
        self.status = status
        self.reason = reason
        super().__init__(f"[{status.value}] {reason}")


# =============================================================================
# PATH WALKING
# =============================================================================

def _locate(items: tuple, node_id: str, kind: str) -> int:
    for index, item in enumerate(items):
        if item.id == node_id:
            return index
    raise MutationRejected(MutationStatus.NOT_FOUND, f"{kind} '{node_id}' not found")


def _swap(items: tuple[T, ...], index: int, item: T) -> tuple[T, ...]:
    return items[:index] + (item,) + items[index + 1:]


def _without(items: tuple[T, ...], index: int) -> tuple[T, ...]:
    return items[:index] + items[index + 1:]


def _append_bounded(items: tuple[T, ...], node: T, kind: str) -> tuple[T, ...]:
    appended, accepted = try_append(items, node)
    if not accepted:
        raise MutationRejected(
            MutationStatus.CAPACITY_EXCEEDED,
            f"{kind} limit of {MAX_CHILDREN} reached",
        )
    return appended


def _edit_objective(
    framework: ResultsFramework,
    objective_id: str,
    edit: Callable[[Objective], Objective],
) -> ResultsFramework:
    index = _locate(framework.objectives, objective_id, "objective")
    updated = edit(framework.objectives[index])
    if updated is framework.objectives[index]:
        return framework
    return replace(framework, objectives=_swap(framework.objectives, index, updated))


def _edit_outcome(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    edit: Callable[[Outcome], Outcome],
) -> ResultsFramework:
    def edit_parent(objective: Objective) -> Objective:
        index = _locate(objective.outcomes, outcome_id, "outcome")
        updated = edit(objective.outcomes[index])
        if updated is objective.outcomes[index]:
            return objective
        return replace(objective, outcomes=_swap(objective.outcomes, index, updated))

    return _edit_objective(framework, objective_id, edit_parent)


def _edit_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    output_id: str,
    edit: Callable[[Output], Output],
) -> ResultsFramework:
    def edit_parent(outcome: Outcome) -> Outcome:
        index = _locate(outcome.outputs, output_id, "output")
        updated = edit(outcome.outputs[index])
        if updated is outcome.outputs[index]:
            return outcome
        return replace(outcome, outputs=_swap(outcome.outputs, index, updated))

    return _edit_outcome(framework, objective_id, outcome_id, edit_parent)


def _edit_indicators(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str],
    edit: Callable[[tuple[Indicator, ...]], tuple[Indicator, ...]],
) -> ResultsFramework:
    """Rewrite the indicator list owned by an outcome or an output."""
    try:
        level = IndicatorLevel(level)
    except ValueError:
        raise MutationRejected(MutationStatus.NOT_FOUND, f"unknown indicator level '{level}'")

    def edit_owner(owner):
        indicators = edit(owner.indicators)
        if indicators is owner.indicators:
            return owner
        return replace(owner, indicators=indicators)

    if level is IndicatorLevel.OUTCOME:
        return _edit_outcome(framework, objective_id, outcome_id, edit_owner)

    if output_id is None:
        raise MutationRejected(MutationStatus.NOT_FOUND, "output id required for output indicators")
    return _edit_output(framework, objective_id, outcome_id, output_id, edit_owner)


def _locate_indicator(indicators: tuple[Indicator, ...], ref: IndicatorRef) -> int:
    # bool is an int subclass; True must not mean index 1
    if isinstance(ref, bool):
        raise MutationRejected(MutationStatus.NOT_FOUND, f"invalid indicator reference {ref!r}")
    if isinstance(ref, int):
        if 0 <= ref < len(indicators):
            return ref
        raise MutationRejected(MutationStatus.NOT_FOUND, f"indicator index {ref} out of range")
    return _locate(indicators, ref, "indicator")


def _run(
    framework: ResultsFramework,
    operation: str,
    build: Callable[[], tuple[ResultsFramework, Optional[str]]],
) -> MutationResult:
    try:
        updated, node_id = build()
    except MutationRejected as e:
        logger.debug(
            "mutation_noop",
            operation=operation,
            status=e.status.value,
            reason=e.reason,
        )
        return MutationResult(framework, e.status, reason=e.reason)
    return MutationResult(updated, MutationStatus.APPLIED, node_id)


def _merge_text(node: T, title: Optional[str], description: Optional[str]) -> T:
    changes = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    if not changes:
        return node
    return replace(node, **changes)


# =============================================================================
# OBJECTIVES
# =============================================================================

def try_add_objective(
    framework: ResultsFramework,
    ids: Optional[IdSource] = None,
) -> MutationResult:
    def build():
        objective = create_objective(ids)
        objectives = _append_bounded(framework.objectives, objective, "objective")
        return replace(framework, objectives=objectives), objective.id

    return _run(framework, "add_objective", build)


def try_remove_objective(framework: ResultsFramework, objective_id: str) -> MutationResult:
    """Remove an objective together with its whole subtree."""
    def build():
        index = _locate(framework.objectives, objective_id, "objective")
        return replace(framework, objectives=_without(framework.objectives, index)), objective_id

    return _run(framework, "remove_objective", build)


def try_update_objective(
    framework: ResultsFramework,
    objective_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> MutationResult:
    def build():
        edited = _edit_objective(
            framework, objective_id, lambda o: _merge_text(o, title, description)
        )
        return edited, objective_id

    return _run(framework, "update_objective", build)


# =============================================================================
# OUTCOMES
# =============================================================================

def try_add_outcome(
    framework: ResultsFramework,
    objective_id: str,
    ids: Optional[IdSource] = None,
) -> MutationResult:
    def build():
        outcome = create_outcome(ids)

        def edit(objective: Objective) -> Objective:
            outcomes = _append_bounded(objective.outcomes, outcome, "outcome")
            return replace(objective, outcomes=outcomes)

        return _edit_objective(framework, objective_id, edit), outcome.id

    return _run(framework, "add_outcome", build)


def try_remove_outcome(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
) -> MutationResult:
    def build():
        def edit(objective: Objective) -> Objective:
            index = _locate(objective.outcomes, outcome_id, "outcome")
            return replace(objective, outcomes=_without(objective.outcomes, index))

        return _edit_objective(framework, objective_id, edit), outcome_id

    return _run(framework, "remove_outcome", build)


def try_update_outcome(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> MutationResult:
    def build():
        edited = _edit_outcome(
            framework, objective_id, outcome_id,
            lambda o: _merge_text(o, title, description),
        )
        return edited, outcome_id

    return _run(framework, "update_outcome", build)


# =============================================================================
# OUTPUTS
# =============================================================================

def try_add_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    ids: Optional[IdSource] = None,
) -> MutationResult:
    def build():
        output = create_output(ids)

        def edit(outcome: Outcome) -> Outcome:
            return replace(outcome, outputs=_append_bounded(outcome.outputs, output, "output"))

        return _edit_outcome(framework, objective_id, outcome_id, edit), output.id

    return _run(framework, "add_output", build)


def try_remove_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    output_id: str,
) -> MutationResult:
    def build():
        def edit(outcome: Outcome) -> Outcome:
            index = _locate(outcome.outputs, output_id, "output")
            return replace(outcome, outputs=_without(outcome.outputs, index))

        return _edit_outcome(framework, objective_id, outcome_id, edit), output_id

    return _run(framework, "remove_output", build)


def try_update_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    output_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> MutationResult:
    def build():
        edited = _edit_output(
            framework, objective_id, outcome_id, output_id,
            lambda o: _merge_text(o, title, description),
        )
        return edited, output_id

    return _run(framework, "update_output", build)


# =============================================================================
# INDICATORS
# =============================================================================

def try_add_indicator(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str] = None,
    ids: Optional[IdSource] = None,
) -> MutationResult:
    """Append a blank indicator. Indicator lists are not capped."""
    def build():
        indicator = create_indicator(ids)
        edited = _edit_indicators(
            framework, level, objective_id, outcome_id, output_id,
            lambda indicators: indicators + (indicator,),
        )
        return edited, indicator.id

    return _run(framework, "add_indicator", build)


def try_remove_indicator(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str],
    indicator: IndicatorRef,
) -> MutationResult:
    def build():
        removed = []

        def edit(indicators):
            index = _locate_indicator(indicators, indicator)
            removed.append(indicators[index].id)
            return _without(indicators, index)

        edited = _edit_indicators(framework, level, objective_id, outcome_id, output_id, edit)
        return edited, removed[0]

    return _run(framework, "remove_indicator", build)


def try_update_indicator_field(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str],
    indicator: IndicatorRef,
    target: FieldTarget,
    value: str,
) -> MutationResult:
    """Replace one field of one indicator; siblings are left untouched."""
    def build():
        touched = []

        def edit(indicators):
            index = _locate_indicator(indicators, indicator)
            updated = apply_field(indicators[index], target, value)
            touched.append(updated.id)
            return _swap(indicators, index, updated)

        edited = _edit_indicators(framework, level, objective_id, outcome_id, output_id, edit)
        return edited, touched[0]

    return _run(framework, "update_indicator_field", build)


# =============================================================================
# PROJECT DURATION
# =============================================================================

def try_set_project_duration(framework: ResultsFramework, years: int) -> MutationResult:
    """
    Change the number of target years.

    Stored targets are never pruned here; entries past the new duration
    stay in the data and are simply no longer displayed.
    """
    def build():
        if isinstance(years, bool) or not isinstance(years, int):
            raise MutationRejected(MutationStatus.OUT_OF_RANGE, f"duration must be an integer, got {years!r}")
        if not (MIN_DURATION <= years <= MAX_DURATION):
            raise MutationRejected(
                MutationStatus.OUT_OF_RANGE,
                f"duration {years} outside [{MIN_DURATION}, {MAX_DURATION}]",
            )
        if years == framework.project_duration:
            return framework, None
        return replace(framework, project_duration=years), None

    return _run(framework, "set_project_duration", build)


# =============================================================================
# TREE-ONLY FORMS
# =============================================================================

def add_objective(framework: ResultsFramework, ids: Optional[IdSource] = None) -> ResultsFramework:
    return try_add_objective(framework, ids).framework


def remove_objective(framework: ResultsFramework, objective_id: str) -> ResultsFramework:
    return try_remove_objective(framework, objective_id).framework


def update_objective(
    framework: ResultsFramework,
    objective_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> ResultsFramework:
    return try_update_objective(framework, objective_id, title, description).framework


def add_outcome(
    framework: ResultsFramework,
    objective_id: str,
    ids: Optional[IdSource] = None,
) -> ResultsFramework:
    return try_add_outcome(framework, objective_id, ids).framework


def remove_outcome(framework: ResultsFramework, objective_id: str, outcome_id: str) -> ResultsFramework:
    return try_remove_outcome(framework, objective_id, outcome_id).framework


def update_outcome(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> ResultsFramework:
    return try_update_outcome(framework, objective_id, outcome_id, title, description).framework


def add_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    ids: Optional[IdSource] = None,
) -> ResultsFramework:
    return try_add_output(framework, objective_id, outcome_id, ids).framework


def remove_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    output_id: str,
) -> ResultsFramework:
    return try_remove_output(framework, objective_id, outcome_id, output_id).framework


def update_output(
    framework: ResultsFramework,
    objective_id: str,
    outcome_id: str,
    output_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> ResultsFramework:
    return try_update_output(
        framework, objective_id, outcome_id, output_id, title, description
    ).framework


def add_indicator(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str] = None,
    ids: Optional[IdSource] = None,
) -> ResultsFramework:
    return try_add_indicator(framework, level, objective_id, outcome_id, output_id, ids).framework


def remove_indicator(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str],
    indicator: IndicatorRef,
) -> ResultsFramework:
    return try_remove_indicator(
        framework, level, objective_id, outcome_id, output_id, indicator
    ).framework


def update_indicator_field(
    framework: ResultsFramework,
    level: Union[IndicatorLevel, str],
    objective_id: str,
    outcome_id: str,
    output_id: Optional[str],
    indicator: IndicatorRef,
    target: FieldTarget,
    value: str,
) -> ResultsFramework:
    return try_update_indicator_field(
        framework, level, objective_id, outcome_id, output_id, indicator, target, value
    ).framework


def set_project_duration(framework: ResultsFramework, years: int) -> ResultsFramework:
    return try_set_project_duration(framework, years).framework
