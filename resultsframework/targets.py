"""
Target Matrix Builder.

The target matrix of an indicator has one column per project year:
"Year 1" .. "Year N", N = project_duration. Stored targets are sparse and
may hold labels beyond N (left over after the duration was shortened).
Those entries are retained but hidden; nothing here deletes them unless
the host explicitly calls prune_targets().
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Optional

from .config import YEAR_LABEL_PREFIX
from .domain import Indicator, ResultsFramework

# Accepts "Year 1", "year1", "YEAR  12"
_YEAR_LABEL_RE = re.compile(rf"^\s*{YEAR_LABEL_PREFIX}\s*(\d+)\s*$", re.IGNORECASE)


def year_label(year: int) -> str:
    return f"{YEAR_LABEL_PREFIX} {year}"


def parse_year_label(label: str) -> Optional[int]:
    """Return the year number of a label, or None if it is not a year label."""
    match = _YEAR_LABEL_RE.match(label)
    if match is None:
        return None
    return int(match.group(1))


def labels_for(duration: int) -> list[str]:
    """Ordered year labels for a project of the given duration."""
    return [year_label(year) for year in range(1, duration + 1)]


def reconcile(indicator: Indicator, labels: list[str]) -> dict[str, str]:
    """
    Display targets for the given labels.

    Labels without a stored value get an empty placeholder. The
    indicator itself is not touched; a placeholder only becomes stored
    data when a value is written through update_indicator_field.
    """
    return {label: indicator.targets.get(label, "") for label in labels}


def hidden_targets(indicator: Indicator, duration: int) -> dict[str, str]:
    """Stored entries that fall outside the active matrix."""
    active = set(labels_for(duration))
    return {
        label: value
        for label, value in indicator.targets.items()
        if label not in active
    }


def _prune_indicator(indicator: Indicator, active: set[str]) -> Indicator:
    kept = {k: v for k, v in indicator.targets.items() if k in active}
    if len(kept) == len(indicator.targets):
        return indicator
    return replace(indicator, targets=kept)


def prune_targets(framework: ResultsFramework) -> ResultsFramework:
    """
    Drop every stored target outside the current duration.

    Opt-in only: the engine never calls this when the duration changes.
    """
    active = set(labels_for(framework.project_duration))

    objectives = []
    for objective in framework.objectives:
        outcomes = []
        for outcome in objective.outcomes:
            outputs = tuple(
                replace(
                    output,
                    indicators=tuple(_prune_indicator(i, active) for i in output.indicators),
                )
                for output in outcome.outputs
            )
            outcomes.append(
                replace(
                    outcome,
                    indicators=tuple(_prune_indicator(i, active) for i in outcome.indicators),
                    outputs=outputs,
                )
            )
        objectives.append(replace(objective, outcomes=tuple(outcomes)))

    return replace(framework, objectives=tuple(objectives))
