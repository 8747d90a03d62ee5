"""Tests for the session engine state transitions."""

from dataclasses import replace

import pytest

from cardtracker.core import session as engine
from cardtracker.core.effects import AppendPending, DeletePending
from cardtracker.core.session import SessionMirror, SessionState, SessionStatus
from cardtracker.models.catalog import Catalog
from cardtracker.models.failure import (
    InvalidStateError,
    MissingParallelError,
    MissingSelectionError,
    NotFoundError,
)


def _configured(
    catalog: Catalog,
    sets: list[str] | None = None,
    parallels: list[str] | None = None,
    location: str | None = "Box A",
) -> SessionState:
    state = engine.configure(SessionState())
    return engine.update_setup(
        state,
        catalog,
        product="2024 Topps",
        sets=sets if sets is not None else ["Base"],
        parallels=parallels if parallels is not None else ["Base", "Gold"],
        location=location,
    )


@pytest.fixture
def active(catalog: Catalog) -> SessionState:
    return engine.start_session(_configured(catalog), catalog)


def _mirror(entry_id: int, card_number: str = "1", parallel: str = "Base") -> SessionMirror:
    return SessionMirror(card_number=card_number, set="Base", parallel=parallel, id=entry_id)


class TestSetup:
    def test_configure_enters_configuring(self) -> None:
        """configure moves an idle session into setup."""
        assert engine.configure(SessionState()).status is SessionStatus.CONFIGURING

    def test_configure_while_active_raises(self, active: SessionState) -> None:
        """A running session must end before another is configured."""
        with pytest.raises(InvalidStateError):
            engine.configure(active)

    def test_setup_parallels_union_base_first(self, catalog: Catalog) -> None:
        """Offered parallels are the union of the chosen sets, base first then by name."""
        topps = catalog.find_product("2024 Topps")

        names = [p.name for p in engine.setup_parallels(topps, ["Base", "Inserts"])]

        assert names == ["Base", "Gold", "Red"]

    def test_update_setup_orders_sets_by_product(self, catalog: Catalog) -> None:
        """Selected sets follow product order, not click order."""
        state = _configured(catalog, sets=["Inserts", "Base"])

        assert state.setup.sets == ("Base", "Inserts")

    def test_update_setup_drops_unoffered_parallels(self, catalog: Catalog) -> None:
        """Parallels no chosen set offers are dropped."""
        state = _configured(catalog, sets=["Inserts"], parallels=["Gold", "Red"])

        assert state.setup.parallels == ("Red",)

    def test_update_setup_unknown_product(self, catalog: Catalog) -> None:
        """An unknown product is reported."""
        state = engine.configure(SessionState())

        with pytest.raises(NotFoundError):
            engine.update_setup(state, catalog, product="Nope")

    def test_update_setup_unknown_set(self, catalog: Catalog) -> None:
        """An unknown set is reported."""
        with pytest.raises(NotFoundError):
            _configured(catalog, sets=["Chrome"])

    def test_update_setup_unknown_location(self, catalog: Catalog) -> None:
        """The location must be in the location vocabulary."""
        with pytest.raises(NotFoundError):
            _configured(catalog, location="Garage")

    def test_update_setup_requires_configuring(self, catalog: Catalog) -> None:
        """Setup cannot be changed outside configuring."""
        with pytest.raises(InvalidStateError):
            engine.update_setup(SessionState(), catalog, product="2024 Topps")


class TestStart:
    def test_start_initializes_active_set_and_parallel(self, active: SessionState) -> None:
        """First selected set and parallel become active."""
        assert active.status is SessionStatus.ACTIVE
        assert active.active_set_name == "Base"
        assert active.active_parallel == "Base"
        assert active.location == "Box A"
        assert active.entries == ()

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"product": None}, "Select a product."),
            ({"sets": ()}, "Select at least one set."),
            ({"parallels": ()}, "Select at least one parallel."),
            ({"location": None}, "Select a location."),
        ],
    )
    def test_missing_selection_blocks_start(
        self, catalog: Catalog, overrides: dict, message: str
    ) -> None:
        """Each missing selection is reported and the session stays in setup."""
        state = _configured(catalog)
        state = replace(state, setup=replace(state.setup, **overrides))

        with pytest.raises(MissingSelectionError) as exc_info:
            engine.start_session(state, catalog)

        assert exc_info.value.message == message

    def test_start_requires_configuring(self, catalog: Catalog) -> None:
        """start without setup is an invalid state."""
        with pytest.raises(InvalidStateError):
            engine.start_session(SessionState(), catalog)

    def test_start_selected_parallels_in_offered_order(self, catalog: Catalog) -> None:
        """The first selected parallel is taken in offered order."""
        state = _configured(catalog, sets=["Base", "Inserts"], parallels=["Red", "Gold"])

        started = engine.start_session(state, catalog)

        assert started.selected_parallels == ("Gold", "Red")
        assert started.active_parallel == "Gold"

    def test_start_with_no_parallel_in_first_set(self, catalog: Catalog) -> None:
        """A first set without any selected parallel starts with none active."""
        state = _configured(catalog, sets=["Base", "Inserts"], parallels=["Red"])

        started = engine.start_session(state, catalog)

        assert started.active_parallel is None
        assert engine.switch_active_set(started, "Inserts").active_parallel == "Red"


class TestSwitching:
    def test_switch_set_keeps_parallel_when_available(self, catalog: Catalog) -> None:
        """A parallel both sets have stays active."""
        state = engine.start_session(
            _configured(catalog, sets=["Base", "Inserts"], parallels=["Base", "Gold"]), catalog
        )

        switched = engine.switch_active_set(state, "Inserts")

        assert switched.active_set_name == "Inserts"
        assert switched.active_parallel == "Base"

    def test_switch_set_reconciles_missing_parallel(self, catalog: Catalog) -> None:
        """An active parallel the new set lacks moves to the first visible one."""
        state = engine.start_session(
            _configured(catalog, sets=["Base", "Inserts"], parallels=["Base", "Gold"]), catalog
        )
        state = engine.switch_active_parallel(state, "Gold")

        switched = engine.switch_active_set(state, "Inserts")

        assert [p.name for p in engine.visible_parallels(switched)] == ["Base"]
        assert switched.active_parallel == "Base"

    def test_switch_set_with_empty_intersection(self, catalog: Catalog) -> None:
        """No visible parallel leaves none active, and tapping is refused."""
        state = engine.start_session(
            _configured(catalog, sets=["Base", "Inserts"], parallels=["Gold"]), catalog
        )

        switched = engine.switch_active_set(state, "Inserts")

        assert switched.active_parallel is None
        with pytest.raises(MissingParallelError):
            engine.tap_add(switched, "I-1")

    def test_switch_to_unselected_set_raises(self, active: SessionState) -> None:
        """Only selected sets can become active."""
        with pytest.raises(NotFoundError):
            engine.switch_active_set(active, "Inserts")

    def test_switch_parallel_must_be_visible(self, active: SessionState) -> None:
        """A parallel outside the intersection is refused."""
        with pytest.raises(InvalidStateError):
            engine.switch_active_parallel(active, "Red")

    def test_switch_requires_active_session(self) -> None:
        """Switching with no session is an invalid state."""
        with pytest.raises(InvalidStateError):
            engine.switch_active_parallel(SessionState(), "Base")


class TestTapAdd:
    def test_tap_plans_one_append(self, active: SessionState) -> None:
        """Tapping plans a quantity-1 append tagged with the location."""
        transition = engine.tap_add(active, "1")

        assert transition.state is active
        (effect,) = transition.effects
        assert isinstance(effect, AppendPending)
        draft = effect.draft
        assert draft.product == "2024 Topps"
        assert draft.set == "Base"
        assert draft.card_number == "1"
        assert draft.parallel == "Base"
        assert draft.quantity == 1
        assert draft.serial_number is None
        assert draft.grade is None
        assert draft.notes is None
        assert draft.tags.to_dict() == {"location": "Box A"}

    def test_tap_unknown_card(self, active: SessionState) -> None:
        """Cards outside the active set are not found."""
        with pytest.raises(NotFoundError):
            engine.tap_add(active, "99")

    def test_tap_without_session(self) -> None:
        """Tapping with no session is an invalid state."""
        with pytest.raises(InvalidStateError):
            engine.tap_add(SessionState(), "1")


class TestEntriesAndUndo:
    def test_record_entry_appends_mirror(self, active: SessionState) -> None:
        """A resolved append is mirrored in order."""
        state = engine.record_entry(active, _mirror(1))
        state = engine.record_entry(state, _mirror(2))

        assert [m.id for m in state.entries] == [1, 2]
        assert state.can_undo

    def test_record_entry_after_end_ignored(self) -> None:
        """A write landing after the session ended is not mirrored."""
        state = engine.record_entry(SessionState(), _mirror(1))

        assert state.entries == ()

    def test_undo_plans_delete_of_last(self, active: SessionState) -> None:
        """Undo targets the most recent mirror."""
        state = engine.record_entry(engine.record_entry(active, _mirror(1)), _mirror(2))

        transition = engine.undo(state)

        assert transition.effects == (DeletePending(entry_id=2),)
        assert transition.state.entry_count == 2

    def test_undo_with_nothing_is_a_no_op(self, active: SessionState) -> None:
        """Undo on an empty session plans nothing."""
        assert engine.undo(active).effects == ()

    def test_drop_entry_removes_last(self, active: SessionState) -> None:
        """drop_entry pops the last mirror when the id matches."""
        state = engine.record_entry(engine.record_entry(active, _mirror(1)), _mirror(2))

        assert [m.id for m in engine.drop_entry(state, 2).entries] == [1]
        assert engine.drop_entry(state, 1) is state

    def test_end_session_resets(self, active: SessionState) -> None:
        """Ending discards the session."""
        state = engine.record_entry(active, _mirror(1))

        ended = engine.end_session(state)

        assert ended.status is SessionStatus.UNINITIALIZED
        assert ended.entries == ()


class TestBadges:
    def test_counts_all_parallels_together(self, active: SessionState) -> None:
        """The badge counts every capture of a card regardless of parallel."""
        state = engine.record_entry(active, _mirror(1, parallel="Base"))
        state = engine.record_entry(state, _mirror(2, parallel="Gold"))
        state = engine.record_entry(state, _mirror(3, card_number="2"))

        assert engine.badge_counts(state) == {"Base|1": 2, "Base|2": 1}
        assert engine.badge_count(state, "Base", "1") == 2
        assert engine.badge_count(state, "Base", "3") == 0
