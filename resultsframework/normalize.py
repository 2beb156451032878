"""
Normalization / Load Gate and serialization.

normalize() is the single place where defaults are applied. It accepts
whatever storage handed back (a dict, a JSON string, None, partially
populated records) and always returns a well-formed ResultsFramework.
It never rejects a load:

    missing objectives          -> ()
    missing / bad duration      -> 1 (out-of-range values are clamped)
    missing / duplicate node id -> freshly minted id
    missing nested lists        -> ()
    missing indicator strings   -> ""
    missing dataCollection      -> all-empty DataCollection
    more than 10 children       -> truncated to the first 10

serialize() is the inverse: plain JSON-ready dicts with the camelCase
keys used by the project record.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import structlog

from .config import DEFAULT_DURATION, MAX_CHILDREN, MAX_DURATION, MIN_DURATION
from .domain import (
    DataCollection,
    Indicator,
    NodeKind,
    Objective,
    Outcome,
    Output,
    ResultsFramework,
)
from .identity import IdSource, new_id
from .targets import parse_year_label, year_label

logger = structlog.get_logger(__name__)


# =============================================================================
# LOADING
# =============================================================================

class _LoadContext:
    """Tracks ids already used and how many defaults were filled."""

    def __init__(self, ids: Optional[IdSource]):
        self.ids = ids
        self.seen: set[str] = set()
        self.repairs = 0

    def repaired(self, what: str, **context) -> None:
        self.repairs += 1
        logger.debug("normalize_default_applied", field=what, **context)

    def claim_id(self, raw_id: Any, kind: NodeKind) -> str:
        if isinstance(raw_id, str) and raw_id and raw_id not in self.seen:
            self.seen.add(raw_id)
            return raw_id
        if isinstance(raw_id, str) and raw_id:
            self.repaired("id", kind=kind.value, duplicate=raw_id)
        else:
            self.repaired("id", kind=kind.value)
        minted = new_id(kind.value, self.ids)
        self.seen.add(minted)
        return minted


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _record(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _records(raw: dict, key: str, ctx: _LoadContext, cap: Optional[int] = None) -> list[dict]:
    value = raw.get(key)
    if not isinstance(value, list):
        if value is not None:
            ctx.repaired(key, reason="not a list")
        return []
    records = [item for item in value if isinstance(item, dict)]
    if len(records) != len(value):
        ctx.repaired(key, reason="non-object entries dropped")
    if cap is not None and len(records) > cap:
        ctx.repaired(key, reason="truncated", count=len(records))
        records = records[:cap]
    return records


def _duration(value: Any, ctx: _LoadContext) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        if value is not None:
            ctx.repaired("projectDuration", value=repr(value))
        return DEFAULT_DURATION
    clamped = max(MIN_DURATION, min(MAX_DURATION, value))
    if clamped != value:
        ctx.repaired("projectDuration", value=value, clamped=clamped)
    return clamped


def _targets(raw: Any) -> dict[str, str]:
    """Copy a targets map, spelling year labels as "Year N"."""
    targets: dict[str, str] = {}
    legacy: dict[str, str] = {}
    for key, value in _record(raw).items():
        key = str(key)
        year = parse_year_label(key)
        canonical = year_label(year) if year is not None else key
        if canonical == key:
            targets[key] = _text(value)
        else:
            legacy[canonical] = _text(value)
    for key, value in legacy.items():
        targets.setdefault(key, value)
    return targets


def _indicator(raw: dict, ctx: _LoadContext) -> Indicator:
    collection = _record(raw.get("dataCollection"))
    return Indicator(
        id=ctx.claim_id(raw.get("id"), NodeKind.INDICATOR),
        description=_text(raw.get("description")),
        baseline=_text(raw.get("baseline")),
        baseline_unit=_text(raw.get("baselineUnit")),
        targets=_targets(raw.get("targets")),
        target_unit=_text(raw.get("targetUnit")),
        monitoring_method=_text(raw.get("monitoringMethod")),
        data_collection=DataCollection(
            frequency=_text(collection.get("frequency")),
            source=_text(collection.get("source")),
            disaggregation=_text(collection.get("disaggregation")),
        ),
        comment=_text(raw.get("comment")),
    )


def _indicators(raw: dict, ctx: _LoadContext) -> tuple[Indicator, ...]:
    return tuple(_indicator(item, ctx) for item in _records(raw, "indicators", ctx))


def _output(raw: dict, ctx: _LoadContext) -> Output:
    return Output(
        id=ctx.claim_id(raw.get("id"), NodeKind.OUTPUT),
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        indicators=_indicators(raw, ctx),
    )


def _outcome(raw: dict, ctx: _LoadContext) -> Outcome:
    return Outcome(
        id=ctx.claim_id(raw.get("id"), NodeKind.OUTCOME),
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        indicators=_indicators(raw, ctx),
        outputs=tuple(
            _output(item, ctx) for item in _records(raw, "outputs", ctx, MAX_CHILDREN)
        ),
    )


def _objective(raw: dict, ctx: _LoadContext) -> Objective:
    return Objective(
        id=ctx.claim_id(raw.get("id"), NodeKind.OBJECTIVE),
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        outcomes=tuple(
            _outcome(item, ctx) for item in _records(raw, "outcomes", ctx, MAX_CHILDREN)
        ),
    )


def load_raw(raw: Any) -> dict:
    """
    Turn stored input into a plain dict.

    Older project records kept the framework as a JSON string. Text that
    does not parse, or parses to something other than an object, becomes
    an empty dict (which normalizes to the default framework).
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("framework_json_unreadable", error=str(e))
            return {}
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("framework_not_an_object", type=type(raw).__name__)
        return {}
    return raw


def normalize(raw: Any, ids: Optional[IdSource] = None) -> ResultsFramework:
    """Build a well-formed ResultsFramework from loosely typed input."""
    data = load_raw(raw)
    ctx = _LoadContext(ids)

    framework = ResultsFramework(
        objectives=tuple(
            _objective(item, ctx) for item in _records(data, "objectives", ctx, MAX_CHILDREN)
        ),
        project_duration=_duration(data.get("projectDuration"), ctx),
    )

    if ctx.repairs:
        logger.info(
            "framework_normalized",
            repairs=ctx.repairs,
            objectives=len(framework.objectives),
        )
    return framework


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_indicator(indicator: Indicator) -> dict:
    return {
        "id": indicator.id,
        "description": indicator.description,
        "baseline": indicator.baseline,
        "baselineUnit": indicator.baseline_unit,
        "targets": dict(indicator.targets),
        "targetUnit": indicator.target_unit,
        "monitoringMethod": indicator.monitoring_method,
        "dataCollection": {
            "frequency": indicator.data_collection.frequency,
            "source": indicator.data_collection.source,
            "disaggregation": indicator.data_collection.disaggregation,
        },
        "comment": indicator.comment,
    }


def serialize(framework: ResultsFramework) -> dict:
    """Plain structural dict, ready for json.dumps."""
    return {
        "objectives": [
            {
                "id": objective.id,
                "title": objective.title,
                "description": objective.description,
                "outcomes": [
                    {
                        "id": outcome.id,
                        "title": outcome.title,
                        "description": outcome.description,
                        "indicators": [serialize_indicator(i) for i in outcome.indicators],
                        "outputs": [
                            {
                                "id": output.id,
                                "title": output.title,
                                "description": output.description,
                                "indicators": [serialize_indicator(i) for i in output.indicators],
                            }
                            for output in outcome.outputs
                        ],
                    }
                    for outcome in objective.outcomes
                ],
            }
            for objective in framework.objectives
        ],
        "projectDuration": framework.project_duration,
    }


def to_json(framework: ResultsFramework, indent: Optional[int] = None) -> str:
    return json.dumps(serialize(framework), indent=indent, ensure_ascii=False)


def project_payload(framework: ResultsFramework, **attributes: Any) -> dict:
    """
    Update payload for the owning project record.

    The framework travels verbatim under "resultsFramework"; every other
    project attribute (budget, dates, team, ...) is passed through as is.
    """
    payload = dict(attributes)
    payload["resultsFramework"] = serialize(framework)
    return payload
