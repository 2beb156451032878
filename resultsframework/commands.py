"""
Mutation requests as typed commands.

A host view turns each user action into one command and hands it to
apply_command() together with the current framework. Commands are plain
frozen dataclasses, so they can be queued, logged or replayed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .domain import IndicatorLevel, ResultsFramework
from .fields import FieldTarget, parse_field_path
from .identity import IdSource
from . import mutations
from .mutations import IndicatorRef, MutationResult


# =============================================================================
# OBJECTIVE / OUTCOME / OUTPUT COMMANDS
# =============================================================================

@dataclass(frozen=True)
class AddObjective:
    pass


@dataclass(frozen=True)
class RemoveObjective:
    objective_id: str


@dataclass(frozen=True)
class UpdateObjective:
    objective_id: str
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class AddOutcome:
    objective_id: str


@dataclass(frozen=True)
class RemoveOutcome:
    objective_id: str
    outcome_id: str


@dataclass(frozen=True)
class UpdateOutcome:
    objective_id: str
    outcome_id: str
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class AddOutput:
    objective_id: str
    outcome_id: str


@dataclass(frozen=True)
class RemoveOutput:
    objective_id: str
    outcome_id: str
    output_id: str


@dataclass(frozen=True)
class UpdateOutput:
    objective_id: str
    outcome_id: str
    output_id: str
    title: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# INDICATOR COMMANDS
# =============================================================================

@dataclass(frozen=True)
class AddIndicator:
    level: IndicatorLevel
    objective_id: str
    outcome_id: str
    output_id: Optional[str] = None


@dataclass(frozen=True)
class RemoveIndicator:
    level: IndicatorLevel
    objective_id: str
    outcome_id: str
    output_id: Optional[str]
    indicator: IndicatorRef


@dataclass(frozen=True)
class UpdateIndicatorField:
    level: IndicatorLevel
    objective_id: str
    outcome_id: str
    output_id: Optional[str]
    indicator: IndicatorRef
    target: FieldTarget
    value: str

    @classmethod
    def from_path(
        cls,
        level: IndicatorLevel,
        objective_id: str,
        outcome_id: str,
        output_id: Optional[str],
        indicator: IndicatorRef,
        path: str,
        value: str,
    ) -> UpdateIndicatorField:
        """
        Build from a dotted path such as "targets.Year 2".

        Raises:
            FieldPathError: If path does not name an indicator field.
        """
        return cls(
            level=level,
            objective_id=objective_id,
            outcome_id=outcome_id,
            output_id=output_id,
            indicator=indicator,
            target=parse_field_path(path),
            value=value,
        )


@dataclass(frozen=True)
class SetProjectDuration:
    years: int


Command = Union[
    AddObjective, RemoveObjective, UpdateObjective,
    AddOutcome, RemoveOutcome, UpdateOutcome,
    AddOutput, RemoveOutput, UpdateOutput,
    AddIndicator, RemoveIndicator, UpdateIndicatorField,
    SetProjectDuration,
]


# =============================================================================
# DISPATCH
# =============================================================================

def apply_command(
    framework: ResultsFramework,
    command: Command,
    ids: Optional[IdSource] = None,
) -> MutationResult:
    """
    Run one command against the framework.

    Raises:
        TypeError: If command is not one of the known command types.
    """
    if isinstance(command, AddObjective):
        return mutations.try_add_objective(framework, ids)
    elif isinstance(command, RemoveObjective):
        return mutations.try_remove_objective(framework, command.objective_id)
    elif isinstance(command, UpdateObjective):
        return mutations.try_update_objective(
            framework, command.objective_id, command.title, command.description
        )
    elif isinstance(command, AddOutcome):
        return mutations.try_add_outcome(framework, command.objective_id, ids)
    elif isinstance(command, RemoveOutcome):
        return mutations.try_remove_outcome(framework, command.objective_id, command.outcome_id)
    elif isinstance(command, UpdateOutcome):
        return mutations.try_update_outcome(
            framework, command.objective_id, command.outcome_id,
            command.title, command.description,
        )
    elif isinstance(command, AddOutput):
        return mutations.try_add_output(framework, command.objective_id, command.outcome_id, ids)
    elif isinstance(command, RemoveOutput):
        return mutations.try_remove_output(
            framework, command.objective_id, command.outcome_id, command.output_id
        )
    elif isinstance(command, UpdateOutput):
        return mutations.try_update_output(
            framework, command.objective_id, command.outcome_id, command.output_id,
            command.title, command.description,
        )
    elif isinstance(command, AddIndicator):
        return mutations.try_add_indicator(
            framework, command.level, command.objective_id, command.outcome_id,
            command.output_id, ids,
        )
    elif isinstance(command, RemoveIndicator):
        return mutations.try_remove_indicator(
            framework, command.level, command.objective_id, command.outcome_id,
            command.output_id, command.indicator,
        )
    elif isinstance(command, UpdateIndicatorField):
        return mutations.try_update_indicator_field(
            framework, command.level, command.objective_id, command.outcome_id,
            command.output_id, command.indicator, command.target, command.value,
        )
    elif isinstance(command, SetProjectDuration):
        return mutations.try_set_project_duration(framework, command.years)

    raise TypeError(f"Unknown command: {command!r}")
