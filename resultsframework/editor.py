"""
Host-side editing session.

FrameworkEditor is the single owner of the current framework value for
one view. Commands are applied one at a time; each replaces the held
value. Expansion state sits beside it and never reaches the payload.

Saving hands the project payload to a caller-supplied function. If that
function raises, the failure is reported in the SaveOutcome and the
in-memory framework keeps the edit. There is no rollback; retrying is
the caller's decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from . import expansion
from .commands import Command, apply_command
from .domain import Indicator, ResultsFramework
from .identity import IdSource
from .mutations import MutationResult
from .normalize import load_raw, normalize, project_payload
from .targets import labels_for, reconcile

logger = structlog.get_logger(__name__)

Saver = Callable[[dict], Any]


@dataclass(frozen=True)
class SaveOutcome:
    ok: bool
    payload: dict
    error: Optional[str] = None


class FrameworkEditor:
    def __init__(
        self,
        framework: Optional[ResultsFramework] = None,
        ids: Optional[IdSource] = None,
    ):
        self.framework = framework if framework is not None else ResultsFramework()
        self.expanded: frozenset[str] = frozenset()
        self.ids = ids
        self.dirty = False
        self.last_result: Optional[MutationResult] = None

    @classmethod
    def load(cls, raw: Any, ids: Optional[IdSource] = None) -> FrameworkEditor:
        """Open stored data through the load gate, keeping legacy expansion flags."""
        data = load_raw(raw)
        editor = cls(normalize(data, ids), ids)
        editor.expanded = expansion.from_legacy_flags(data)
        return editor

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def dispatch(self, command: Command) -> MutationResult:
        result = apply_command(self.framework, command, self.ids)
        self.last_result = result
        if result.applied and result.framework is not self.framework:
            self.framework = result.framework
            self.dirty = True
        return result

    # -------------------------------------------------------------------------
    # View state
    # -------------------------------------------------------------------------

    def toggle(self, node_id: str) -> bool:
        """Flip a node's expansion. Returns the new state."""
        self.expanded = expansion.toggle(self.expanded, node_id)
        return node_id in self.expanded

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self.expanded

    def target_labels(self) -> list[str]:
        return labels_for(self.framework.project_duration)

    def display_targets(self, indicator: Indicator) -> dict[str, str]:
        return reconcile(indicator, self.target_labels())

    # -------------------------------------------------------------------------
    # Persistence hand-off
    # -------------------------------------------------------------------------

    def save(self, saver: Saver, **project_attributes: Any) -> SaveOutcome:
        payload = project_payload(self.framework, **project_attributes)
        try:
            saver(payload)
        except Exception as e:
            logger.exception("framework_save_failed", error=str(e))
            return SaveOutcome(ok=False, payload=payload, error=str(e))

        self.dirty = False
        logger.info(
            "framework_saved",
            objectives=len(self.framework.objectives),
            project_duration=self.framework.project_duration,
        )
        return SaveOutcome(ok=True, payload=payload)
