"""
Tests for identity generation, bounded lists and the domain model.

These tests verify:
1. Ids are unique, carry their node kind and only remember the current millisecond
2. Bounded append is a no-op at the cap, never an error
3. Factories build blank nodes with the documented defaults
4. Nodes are hashable and indicator targets are read-only
"""

from types import SimpleNamespace

import pytest

from resultsframework.bounded import is_full, try_append
from resultsframework.config import DEFAULT_FREQUENCY, MAX_CHILDREN
from resultsframework.domain import (
    DataCollection,
    Indicator,
    Objective,
    Outcome,
    Output,
    ResultsFramework,
    create_indicator,
    create_objective,
    create_outcome,
    create_output,
)
from resultsframework import identity
from resultsframework.identity import CounterIds, RandomIds, new_id


# =============================================================================
# IDENTITY
# =============================================================================

class TestIdentity:
    """Test id sources."""

    def test_random_ids_are_unique(self):
        """A thousand ids from one source never collide."""
        source = RandomIds()
        ids = [source("objective") for _ in range(1000)]
        assert len(set(ids)) == 1000

    def test_random_id_format(self):
        """Default ids look like <kind>_<millis>_<suffix>."""
        value = RandomIds()("outcome")
        kind, millis, suffix = value.split("_")
        assert kind == "outcome"
        assert millis.isdigit()
        assert len(suffix) == 9

    def test_counter_ids_are_deterministic(self):
        """Two counters produce the same sequence."""
        first, second = CounterIds(), CounterIds()
        assert [first("output") for _ in range(3)] == [second("output") for _ in range(3)]
        assert CounterIds()("objective") == "objective_1"

    def test_counter_never_repeats_across_kinds(self):
        """The counter is shared between kinds."""
        ids = CounterIds()
        assert ids("objective") == "objective_1"
        assert ids("outcome") == "outcome_2"

    def test_new_id_uses_injected_source(self):
        """new_id defers to the source it is given."""
        assert new_id("indicator", CounterIds(start=7)) == "indicator_7"

    def test_new_id_default_source(self):
        """Without a source, new_id still yields distinct ids."""
        assert new_id("objective") != new_id("objective")

    def test_random_ids_only_remember_current_millisecond(self, monkeypatch):
        """Ids from earlier milliseconds are forgotten."""
        clock = iter([1000.0, 1000.0, 1000.5, 1001.0])
        monkeypatch.setattr(identity, "time", SimpleNamespace(time=lambda: next(clock)))
        source = RandomIds()
        source("objective")
        source("objective")
        assert len(source._issued) == 2
        source("objective")
        assert len(source._issued) == 1
        last = source("objective")
        assert source._issued == {last}

    def test_random_ids_millis_never_go_backwards(self, monkeypatch):
        """A clock stepping back reuses the last millisecond."""
        clock = iter([2000.5, 2000.25])
        monkeypatch.setattr(identity, "time", SimpleNamespace(time=lambda: next(clock)))
        source = RandomIds()
        first = source("outcome")
        second = source("outcome")
        assert first.split("_")[1] == second.split("_")[1] == "2000500"
        assert first != second


# =============================================================================
# BOUNDED LIST
# =============================================================================

class TestBoundedList:
    """Test the shared cap helper."""

    def test_append_below_cap(self):
        """Appending below the cap is accepted."""
        items, accepted = try_append((1, 2), 3)
        assert accepted is True
        assert items == (1, 2, 3)

    def test_append_at_cap_is_noop(self):
        """At the cap the very same tuple comes back."""
        full = tuple(range(MAX_CHILDREN))
        items, accepted = try_append(full, 99)
        assert accepted is False
        assert items is full

    def test_custom_cap(self):
        """The cap is a parameter."""
        assert is_full((1, 2), cap=2)
        assert not is_full((1,), cap=2)

    def test_default_cap_is_ten(self):
        """The framework-wide cap is ten."""
        assert MAX_CHILDREN == 10


# =============================================================================
# DOMAIN MODEL
# =============================================================================

class TestDomainModel:
    """Test domain objects and factories."""

    def test_empty_framework_defaults(self):
        """A fresh framework has no objectives and a one-year duration."""
        framework = ResultsFramework()
        assert framework.objectives == ()
        assert framework.project_duration == 1

    def test_nodes_are_frozen(self):
        """Nodes cannot be edited in place."""
        objective = Objective(id="objective_1")
        with pytest.raises(AttributeError):
            objective.title = "changed"

    def test_blank_indicator_defaults(self):
        """New indicators default to the monthly frequency and empty strings."""
        indicator = create_indicator(CounterIds())
        assert indicator.id == "indicator_1"
        assert indicator.description == ""
        assert indicator.targets == {}
        assert indicator.data_collection == DataCollection(frequency=DEFAULT_FREQUENCY)

    def test_factories_use_kind_prefix(self):
        """Each factory mints an id with its own prefix."""
        ids = CounterIds()
        assert create_objective(ids).id.startswith("objective_")
        assert create_outcome(ids).id.startswith("outcome_")
        assert create_output(ids).id.startswith("output_")

    def test_blank_nodes_have_empty_titles(self):
        """Factories leave title and description empty."""
        outcome = create_outcome(CounterIds())
        assert outcome.title == ""
        assert outcome.description == ""
        assert outcome.indicators == ()
        assert outcome.outputs == ()

    def test_node_ids_walks_whole_tree(self):
        """node_ids covers every level, indicators included."""
        framework = ResultsFramework(objectives=(
            Objective(id="a", outcomes=(
                Outcome(
                    id="b",
                    indicators=(Indicator(id="c"),),
                    outputs=(Output(id="d", indicators=(Indicator(id="e"),)),),
                ),
            )),
        ))
        assert list(framework.node_ids()) == ["a", "b", "c", "d", "e"]

    def test_find_objective(self):
        """find_objective returns None on a miss."""
        framework = ResultsFramework(objectives=(Objective(id="a"),))
        assert framework.find_objective("a").id == "a"
        assert framework.find_objective("missing") is None

    def test_indicator_targets_are_read_only(self):
        """Targets cannot be written through the node."""
        indicator = Indicator(id="i", targets={"Year 1": "10"})
        with pytest.raises(TypeError):
            indicator.targets["Year 1"] = "20"

    def test_indicator_copies_caller_targets(self):
        """Editing the dict a node was built from leaves the node alone."""
        source = {"Year 1": "10"}
        indicator = Indicator(id="i", targets=source)
        source["Year 1"] = "changed"
        assert indicator.targets == {"Year 1": "10"}

    def test_nodes_are_hashable(self):
        """Every node, the framework included, can be hashed."""
        indicator = Indicator(id="i", targets={"Year 2": "5", "Year 1": "1"})
        framework = ResultsFramework(objectives=(
            Objective(id="a", outcomes=(
                Outcome(id="b", indicators=(indicator,), outputs=(Output(id="d"),)),
            )),
        ))
        same = Indicator(id="i", targets={"Year 1": "1", "Year 2": "5"})
        assert hash(indicator) == hash(same)
        assert indicator == same
        assert isinstance(hash(framework), int)
        assert len({framework, framework}) == 1
