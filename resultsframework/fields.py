"""
Typed update targets for indicator fields.

An indicator update names exactly one of:

    IndicatorField       : a top-level string field (description, baseline, ...)
    DataCollectionField  : one of frequency / source / disaggregation
    TargetYear           : one year entry of the targets map

Hosts that still speak in dotted paths ("dataCollection.frequency",
"targets.Year 2") convert them with parse_field_path(), which is the
only place a malformed path can be reported.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from .domain import Indicator
from .targets import parse_year_label, year_label


class FieldPathError(ValueError):
    """Raised when a field path does not name an indicator field."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid indicator field path '{path}': {reason}")


class IndicatorField(Enum):
    """Top-level indicator string fields, valued by their wire name."""
    DESCRIPTION = "description"
    BASELINE = "baseline"
    BASELINE_UNIT = "baselineUnit"
    TARGET_UNIT = "targetUnit"
    MONITORING_METHOD = "monitoringMethod"
    COMMENT = "comment"

    @property
    def attribute(self) -> str:
        return _INDICATOR_ATTRIBUTES[self]


_INDICATOR_ATTRIBUTES = {
    IndicatorField.DESCRIPTION: "description",
    IndicatorField.BASELINE: "baseline",
    IndicatorField.BASELINE_UNIT: "baseline_unit",
    IndicatorField.TARGET_UNIT: "target_unit",
    IndicatorField.MONITORING_METHOD: "monitoring_method",
    IndicatorField.COMMENT: "comment",
}


class DataCollectionField(Enum):
    FREQUENCY = "frequency"
    SOURCE = "source"
    DISAGGREGATION = "disaggregation"


@dataclass(frozen=True)
class TargetYear:
    """A single year column of the target matrix, e.g. TargetYear("Year 2")."""
    label: str

    def __post_init__(self):
        year = parse_year_label(self.label)
        if year is None or year < 1:
            raise FieldPathError(f"targets.{self.label}", "not a year label")
        # Canonical spelling so "year2" and "Year 2" address the same entry
        object.__setattr__(self, "label", year_label(year))

    @classmethod
    def of(cls, year: int) -> TargetYear:
        return cls(year_label(year))


FieldTarget = Union[IndicatorField, DataCollectionField, TargetYear]


def parse_field_path(path: str) -> FieldTarget:
    """
    Convert a dotted field path into a typed target.

    Raises:
        FieldPathError: If the path is not one of the closed set.
    """
    head, sep, tail = path.partition(".")

    if not sep:
        try:
            return IndicatorField(head)
        except ValueError:
            raise FieldPathError(path, f"unknown field '{head}'")

    if head == "dataCollection":
        try:
            return DataCollectionField(tail)
        except ValueError:
            raise FieldPathError(path, f"unknown dataCollection field '{tail}'")

    if head == "targets":
        return TargetYear(tail)

    raise FieldPathError(path, f"'{head}' has no sub-fields")


def field_path(target: FieldTarget) -> str:
    """Inverse of parse_field_path."""
    if isinstance(target, IndicatorField):
        return target.value
    if isinstance(target, DataCollectionField):
        return f"dataCollection.{target.value}"
    return f"targets.{target.label}"


def apply_field(indicator: Indicator, target: FieldTarget, value: str) -> Indicator:
    """Return a copy of indicator with exactly one field replaced."""
    if isinstance(target, IndicatorField):
        return replace(indicator, **{target.attribute: value})

    if isinstance(target, DataCollectionField):
        data_collection = replace(indicator.data_collection, **{target.value: value})
        return replace(indicator, data_collection=data_collection)

    if isinstance(target, TargetYear):
        targets = dict(indicator.targets)
        targets[target.label] = value
        return replace(indicator, targets=targets)

    raise TypeError(f"Unsupported field target: {target!r}")
