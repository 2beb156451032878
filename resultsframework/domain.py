"""
Core Domain Objects for the Results Framework Engine.

The framework is a strictly hierarchical, bounded tree:

    ResultsFramework
        Objective   (<= 10)
            Outcome     (<= 10 per objective, owns indicators)
                Output      (<= 10 per outcome, owns indicators)

Indicators hang off outcomes and outputs only, never off objectives.

All objects are frozen. Child collections are tuples; the only mapping
(Indicator.targets) is wrapped in a read-only proxy and is replaced, never
edited, by the mutation engine. Every node is hashable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .config import DEFAULT_DURATION, DEFAULT_FREQUENCY
from .identity import IdSource, new_id


# =============================================================================
# VOCABULARIES
# =============================================================================

# Suggested values for data collection. Free text is still accepted.
FREQUENCIES = (
    "Monthly",
    "Quarterly",
    "Semi-annually",
    "Annually",
    "Bi-annually",
    "As needed",
)

DISAGGREGATION_OPTIONS = (
    "Age",
    "Gender",
    "Location",
    "Disability",
    "Education level",
    "Income level",
    "None",
)


class NodeKind(str, Enum):
    """Node kinds; the value doubles as the id prefix."""
    OBJECTIVE = "objective"
    OUTCOME = "outcome"
    OUTPUT = "output"
    INDICATOR = "indicator"


class IndicatorLevel(str, Enum):
    """Where an indicator is attached."""
    OUTCOME = "outcome"
    OUTPUT = "output"


# =============================================================================
# INDICATOR
# =============================================================================

@dataclass(frozen=True)
class DataCollection:
    """How and where indicator data is gathered."""
    frequency: str = ""
    source: str = ""
    disaggregation: str = ""


@dataclass(frozen=True)
class Indicator:
    """
    A measurable metric attached to an Outcome or an Output.

    targets maps year labels ("Year 1", "Year 2", ...) to free-text
    values. It is sparse: a label only appears once a value has been
    written for it. Labels beyond the current project duration are kept.
    Any mapping passed in is copied into a read-only view.
    """
    id: str
    description: str = ""
    baseline: str = ""
    baseline_unit: str = ""
    targets: Mapping[str, str] = field(default_factory=dict)
    target_unit: str = ""
    monitoring_method: str = ""
    data_collection: DataCollection = field(default_factory=DataCollection)
    comment: str = ""

    def __post_init__(self):
        object.__setattr__(self, "targets", MappingProxyType(dict(self.targets)))

    def __hash__(self):
        return hash((
            self.id,
            self.description,
            self.baseline,
            self.baseline_unit,
            tuple(sorted(self.targets.items())),
            self.target_unit,
            self.monitoring_method,
            self.data_collection,
            self.comment,
        ))


# =============================================================================
# HIERARCHY NODES
# =============================================================================

@dataclass(frozen=True)
class Output:
    """A concrete deliverable under an Outcome."""
    id: str
    title: str = ""
    description: str = ""
    indicators: tuple[Indicator, ...] = ()


@dataclass(frozen=True)
class Outcome:
    """An intermediate result under an Objective."""
    id: str
    title: str = ""
    description: str = ""
    indicators: tuple[Indicator, ...] = ()
    outputs: tuple[Output, ...] = ()


@dataclass(frozen=True)
class Objective:
    """Top-level goal of the framework."""
    id: str
    title: str = ""
    description: str = ""
    outcomes: tuple[Outcome, ...] = ()


@dataclass(frozen=True)
class ResultsFramework:
    """
    Root of a project's monitoring plan.

    project_duration (years) decides how many target columns are shown
    for each indicator. It does not constrain what is stored.
    """
    objectives: tuple[Objective, ...] = ()
    project_duration: int = DEFAULT_DURATION

    def find_objective(self, objective_id: str) -> Optional[Objective]:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None

    def node_ids(self) -> Iterator[str]:
        """Every id in the tree, depth-first, indicators included."""
        for objective in self.objectives:
            yield objective.id
            for outcome in objective.outcomes:
                yield outcome.id
                for indicator in outcome.indicators:
                    yield indicator.id
                for output in outcome.outputs:
                    yield output.id
                    for indicator in output.indicators:
                        yield indicator.id


# =============================================================================
# FACTORIES
# =============================================================================

def create_indicator(ids: Optional[IdSource] = None) -> Indicator:
    """A blank indicator with the default collection frequency."""
    return Indicator(
        id=new_id(NodeKind.INDICATOR.value, ids),
        data_collection=DataCollection(frequency=DEFAULT_FREQUENCY),
    )


def create_output(ids: Optional[IdSource] = None) -> Output:
    return Output(id=new_id(NodeKind.OUTPUT.value, ids))


def create_outcome(ids: Optional[IdSource] = None) -> Outcome:
    return Outcome(id=new_id(NodeKind.OUTCOME.value, ids))


def create_objective(ids: Optional[IdSource] = None) -> Objective:
    return Objective(id=new_id(NodeKind.OBJECTIVE.value, ids))
