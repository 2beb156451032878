"""
Indicator extraction.

Flattens the framework into one row per indicator with the ids of its
owners, for indicator tracking screens and reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from .domain import Indicator, IndicatorLevel, ResultsFramework
from .targets import labels_for, reconcile


@dataclass(frozen=True)
class IndicatorRecord:
    """An indicator together with where it lives in the tree."""
    indicator: Indicator
    level: IndicatorLevel
    objective_id: str
    outcome_id: str
    output_id: Optional[str]
    position: int  # index within the owning indicator list
    owner_title: str

    def display_targets(self, duration: int) -> dict[str, str]:
        return reconcile(self.indicator, labels_for(duration))


def iter_indicators(framework: ResultsFramework) -> Iterator[IndicatorRecord]:
    """
    Yield every indicator in tree order.

    An outcome's own indicators come before the indicators of its outputs.
    """
    for objective in framework.objectives:
        for outcome in objective.outcomes:
            for position, indicator in enumerate(outcome.indicators):
                yield IndicatorRecord(
                    indicator=indicator,
                    level=IndicatorLevel.OUTCOME,
                    objective_id=objective.id,
                    outcome_id=outcome.id,
                    output_id=None,
                    position=position,
                    owner_title=outcome.title,
                )
            for output in outcome.outputs:
                for position, indicator in enumerate(output.indicators):
                    yield IndicatorRecord(
                        indicator=indicator,
                        level=IndicatorLevel.OUTPUT,
                        objective_id=objective.id,
                        outcome_id=outcome.id,
                        output_id=output.id,
                        position=position,
                        owner_title=output.title,
                    )


@dataclass(frozen=True)
class FrameworkSummary:
    objectives: int
    outcomes: int
    outputs: int
    outcome_indicators: int
    output_indicators: int
    project_duration: int

    @property
    def indicators(self) -> int:
        return self.outcome_indicators + self.output_indicators


def summarize(framework: ResultsFramework) -> FrameworkSummary:
    outcomes = [o for objective in framework.objectives for o in objective.outcomes]
    outputs = [out for outcome in outcomes for out in outcome.outputs]
    return FrameworkSummary(
        objectives=len(framework.objectives),
        outcomes=len(outcomes),
        outputs=len(outputs),
        outcome_indicators=sum(len(o.indicators) for o in outcomes),
        output_indicators=sum(len(o.indicators) for o in outputs),
        project_duration=framework.project_duration,
    )
