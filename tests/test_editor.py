"""
Tests for expansion state, command dispatch and the editing session.

These tests verify:
1. Expansion state is a plain membership flip, kept apart from the tree
2. Every command type routes to its engine operation
3. A failed save keeps the in-memory edit (no rollback)
"""

import pytest

from resultsframework import expansion
from resultsframework.commands import (
    AddIndicator,
    AddObjective,
    AddOutcome,
    AddOutput,
    RemoveIndicator,
    RemoveObjective,
    RemoveOutcome,
    RemoveOutput,
    SetProjectDuration,
    UpdateIndicatorField,
    UpdateObjective,
    UpdateOutcome,
    UpdateOutput,
    apply_command,
)
from resultsframework.domain import IndicatorLevel, ResultsFramework
from resultsframework.editor import FrameworkEditor
from resultsframework.fields import FieldPathError, TargetYear
from resultsframework.identity import CounterIds
from resultsframework.mutations import MutationStatus
from resultsframework.normalize import serialize


# =============================================================================
# TEST FIXTURES
# =============================================================================

def populated_editor():
    """Editor holding one objective > outcome > output branch."""
    editor = FrameworkEditor(ids=CounterIds())
    obj = editor.dispatch(AddObjective()).node_id
    oc = editor.dispatch(AddOutcome(obj)).node_id
    out = editor.dispatch(AddOutput(obj, oc)).node_id
    return editor, obj, oc, out


# =============================================================================
# EXPANSION STATE
# =============================================================================

class TestExpansion:
    """Test the expansion side-table."""

    def test_toggle_flips_membership(self):
        """Toggling twice returns to the start."""
        state = expansion.toggle(frozenset(), "objective_1")
        assert state == {"objective_1"}
        assert expansion.toggle(state, "objective_1") == frozenset()

    def test_toggle_does_not_mutate(self):
        """The input set is left alone."""
        state = frozenset({"a"})
        expansion.toggle(state, "b")
        assert state == {"a"}

    def test_expand_and_collapse(self):
        """Bulk helpers add and remove ids."""
        state = expansion.expand(frozenset(), ["a", "b"])
        assert expansion.collapse(state, ["a"]) == {"b"}

    def test_expand_all_skips_indicators(self):
        """Only objectives, outcomes and outputs are expandable."""
        editor, obj, oc, out = populated_editor()
        editor.dispatch(AddIndicator(IndicatorLevel.OUTCOME, obj, oc))
        assert expansion.expand_all(editor.framework) == {obj, oc, out}

    def test_stale_ids_are_harmless_and_prunable(self):
        """Removing a node leaves its id tracked until pruned."""
        editor, obj, oc, out = populated_editor()
        editor.toggle(oc)
        editor.dispatch(RemoveOutcome(obj, oc))
        assert editor.is_expanded(oc)
        assert expansion.prune(editor.expanded, editor.framework) == frozenset()

    def test_legacy_flags(self):
        """isExpanded flags at every level are recovered."""
        raw = {"objectives": [
            {"id": "o1", "isExpanded": True, "outcomes": [
                {"id": "oc1", "isExpanded": False, "outputs": [
                    {"id": "out1", "isExpanded": True},
                ]},
            ]},
            {"isExpanded": True},
        ]}
        assert expansion.from_legacy_flags(raw) == {"o1", "out1"}

    def test_expansion_never_serialized(self):
        """Expanded ids do not appear in the saved framework."""
        editor, obj, _, _ = populated_editor()
        editor.toggle(obj)
        assert "isExpanded" not in serialize(editor.framework)["objectives"][0]


# =============================================================================
# COMMAND DISPATCH
# =============================================================================

class TestCommands:
    """Test apply_command routing."""

    def test_full_editing_sequence(self):
        """Every command type applies against a live tree."""
        editor, obj, oc, out = populated_editor()
        commands = [
            UpdateObjective(obj, title="Health"),
            UpdateOutcome(obj, oc, description="Access"),
            UpdateOutput(obj, oc, out, title="Clinics built"),
            AddIndicator(IndicatorLevel.OUTPUT, obj, oc, out),
            UpdateIndicatorField(IndicatorLevel.OUTPUT, obj, oc, out, 0, TargetYear.of(1), "3"),
            SetProjectDuration(2),
        ]
        for command in commands:
            assert editor.dispatch(command).applied, command

        output = editor.framework.objectives[0].outcomes[0].outputs[0]
        assert output.title == "Clinics built"
        assert output.indicators[0].targets == {"Year 1": "3"}
        assert editor.framework.project_duration == 2

    def test_removals(self):
        """Remove commands drop their nodes."""
        editor, obj, oc, out = populated_editor()
        editor.dispatch(AddIndicator(IndicatorLevel.OUTCOME, obj, oc))
        assert editor.dispatch(RemoveIndicator(IndicatorLevel.OUTCOME, obj, oc, None, 0)).applied
        assert editor.dispatch(RemoveOutput(obj, oc, out)).applied
        assert editor.dispatch(RemoveObjective(obj)).applied
        assert editor.framework.objectives == ()

    def test_from_path(self):
        """Dotted paths build typed update commands."""
        command = UpdateIndicatorField.from_path(
            IndicatorLevel.OUTCOME, "o", "oc", None, 0, "dataCollection.source", "Survey"
        )
        assert command.target.value == "source"

    def test_from_path_rejects_bad_path(self):
        """Bad paths fail at the boundary, before any dispatch."""
        with pytest.raises(FieldPathError):
            UpdateIndicatorField.from_path(
                IndicatorLevel.OUTCOME, "o", "oc", None, 0, "targets.Later", "x"
            )

    def test_unknown_command(self):
        """Objects that are not commands raise TypeError."""
        with pytest.raises(TypeError):
            apply_command(ResultsFramework(), object())

    def test_capacity_is_signalled(self):
        """The eleventh objective reports CAPACITY_EXCEEDED."""
        framework = ResultsFramework()
        for _ in range(10):
            framework = apply_command(framework, AddObjective()).framework
        result = apply_command(framework, AddObjective())
        assert result.status is MutationStatus.CAPACITY_EXCEEDED
        assert result.framework is framework


# =============================================================================
# EDITING SESSION
# =============================================================================

class TestFrameworkEditor:
    """Test the host session."""

    def test_noop_keeps_clean_state(self):
        """A no-op neither changes the tree nor marks it dirty."""
        editor = FrameworkEditor()
        before = editor.framework
        result = editor.dispatch(RemoveObjective("missing"))
        assert result.status is MutationStatus.NOT_FOUND
        assert editor.framework is before
        assert editor.dirty is False
        assert editor.last_result is result

    def test_empty_update_keeps_clean_state(self):
        """An update carrying no fields does not mark a saved session dirty."""
        editor, obj, oc, out = populated_editor()
        editor.save(lambda payload: None)
        before = editor.framework
        for command in (UpdateObjective(obj), UpdateOutcome(obj, oc), UpdateOutput(obj, oc, out)):
            result = editor.dispatch(command)
            assert result.applied
            assert editor.framework is before
        assert editor.dirty is False

    def test_load_normalizes_and_reads_flags(self):
        """Loading goes through the gate and restores legacy expansion."""
        editor = FrameworkEditor.load(
            '{"objectives": [{"id": "o1", "isExpanded": true}], "projectDuration": 4}'
        )
        assert editor.framework.objectives[0].id == "o1"
        assert editor.is_expanded("o1")
        assert editor.target_labels() == ["Year 1", "Year 2", "Year 3", "Year 4"]

    def test_display_targets(self):
        """Display targets follow the held duration."""
        editor, obj, oc, _ = populated_editor()
        editor.dispatch(AddIndicator(IndicatorLevel.OUTCOME, obj, oc))
        editor.dispatch(SetProjectDuration(2))
        indicator = editor.framework.objectives[0].outcomes[0].indicators[0]
        assert editor.display_targets(indicator) == {"Year 1": "", "Year 2": ""}

    def test_successful_save(self):
        """The saver receives the project payload and the session is clean."""
        editor, obj, _, _ = populated_editor()
        sent = []
        outcome = editor.save(sent.append, name="Outreach")
        assert outcome.ok
        assert sent[0]["name"] == "Outreach"
        assert sent[0]["resultsFramework"]["objectives"][0]["id"] == obj
        assert editor.dirty is False

    def test_failed_save_keeps_edit(self):
        """A raising saver is reported and the edit stays in memory."""
        editor, obj, _, _ = populated_editor()
        editor.dispatch(UpdateObjective(obj, title="Edited"))

        def failing_saver(payload):
            raise ConnectionError("backend unavailable")

        outcome = editor.save(failing_saver)
        assert outcome.ok is False
        assert "backend unavailable" in outcome.error
        assert editor.framework.objectives[0].title == "Edited"
        assert editor.dirty is True
