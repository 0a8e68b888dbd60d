"""Statement session: editing operations, lock mode and the version workflow."""

from dataclasses import replace

import pytest

from fee_statement.database import (
    BARNDOMINIUM,
    BARNDOMINIUM_FEES,
    COMMERCIAL,
    COMMERCIAL_FEES,
    RESIDENTIAL_GARAGE,
)
from fee_statement.statement_session import StatementSession, is_locked
from fee_statement.statement_store import StatementLockedError, StatementPersistenceError, VersionStoreError


@pytest.fixture
def garage(repository):
    return StatementSession("lead-100", repository, project_type=RESIDENTIAL_GARAGE, project_name="Garage")


def _item_named(session, description):
    return next(item for item in session.items if item.description == description)


def test_new_session_starts_from_catalog(repository):
    session = StatementSession("lead-1", repository)
    assert session.project_details.project_type == BARNDOMINIUM
    assert len(session.items) == len(BARNDOMINIUM_FEES)
    assert session.items[0].id == "default-0"
    assert session.profit_margin == 20
    assert session.total == 0


def test_unknown_initial_type_falls_back_to_default(repository):
    session = StatementSession("lead-1", repository, project_type="warehouse")
    assert session.project_details.project_type == BARNDOMINIUM


def test_garage_end_to_end_totals(garage):
    garage.update_project_details({"width": "40", "length": "60"})
    garage.auto_calculate_quantities()

    assert garage.project_details.sqft == 2400
    assert _item_named(garage, "Lumber Frame Structure").total == 20400
    assert garage.subtotal == 80800
    assert garage.profit == 16160
    assert garage.total == 96960


def test_update_item_recomputes_total(garage):
    item_id = garage.items[0].id
    garage.update_item(item_id, "quantity", "10")
    garage.update_item(item_id, "unit_price", "2.125")
    item = garage.find_item(item_id)
    assert item.unit_price == 2.13
    assert item.total == 21.3


def test_invalid_numeric_edit_becomes_zero(garage):
    item_id = garage.items[0].id
    garage.update_item(item_id, "quantity", "lots")
    assert garage.find_item(item_id).quantity == 0


def test_update_item_rejects_unknown_field(garage):
    with pytest.raises(ValueError):
        garage.update_item(garage.items[0].id, "total", 5)


def test_update_missing_item_is_noop(garage):
    before = list(garage.items)
    assert garage.update_item("nope", "quantity", 3) is None
    assert garage.items == before


def test_add_and_delete_custom_item(garage):
    item = garage.add_new_item("Structure & Framing")
    assert item.id.startswith("custom-")
    assert (item.description, item.unit, item.quantity, item.unit_price) == ("New Item", "each", 0, 0)
    assert item in garage.grouped_items()["Structure & Framing"]

    assert garage.delete_item(item.id) is True
    assert garage.find_item(item.id) is None
    assert garage.delete_item(item.id) is False


def test_totals_follow_item_and_margin_edits(garage):
    garage.update_item(garage.items[0].id, "quantity", 100)
    garage.update_item(garage.items[0].id, "unit_price", 500)
    assert garage.subtotal == 50000
    assert garage.total == 60000

    garage.set_profit_margin("10")
    assert garage.profit == 5000
    assert garage.total == 55000

    garage.set_profit_margin("")
    assert garage.profit_margin == 0
    assert garage.total == 50000


def test_count_edit_does_not_recompute_area(garage):
    garage.statement.project_details = replace(garage.project_details, sqft=999)
    garage.update_project_details({"doors": 3})
    assert garage.project_details.sqft == 999
    assert garage.project_details.doors == 3

    garage.update_project_details({"width": 10, "length": 10})
    assert garage.project_details.sqft == 100


def test_derived_areas_cannot_be_set(garage):
    garage.update_project_details({"sqft": 5000, "width": 20, "length": 20})
    assert garage.project_details.sqft == 400


def test_unknown_detail_field_rejected(garage):
    with pytest.raises(ValueError):
        garage.update_project_details({"basement": 1})


def test_floors_clamped(repository):
    session = StatementSession("lead-2", repository)
    session.update_project_details({"floors": "5"})
    assert session.project_details.floors == 2
    session.update_project_details({"floors": "0"})
    assert session.project_details.floors == 1


def test_split_type_doubles_finish_on_two_floors(repository):
    session = StatementSession("lead-3", repository)
    session.update_project_details({"finished_width": 30, "finished_length": 40, "floors": 2})
    session.auto_calculate_quantities()
    assert _item_named(session, "Drywall & Finishing").quantity == 2400
    assert _item_named(session, "Drywall & Finishing").total == 11400
    assert _item_named(session, "Electrical Rough-in (Finished)").quantity == 1200
    assert _item_named(session, "Interior Stairs").quantity == 1


def test_change_project_type_resets_items(repository):
    session = StatementSession("lead-4", repository)
    session.update_project_details({"finished_width": 30, "finished_length": 40})
    session.auto_calculate_quantities()
    session.add_new_item("Finished Space")

    session.change_project_type(COMMERCIAL)

    assert len(session.items) == len(COMMERCIAL_FEES)
    assert all(item.id.startswith("commercial-") for item in session.items)
    assert all(item.quantity == 0 for item in session.items)
    assert session.project_details.finished_sqft is None
    assert session.project_details.unfinished_sqft is None
    assert session.total == 0


def test_change_to_split_type_keeps_areas(repository):
    session = StatementSession("lead-5", repository)
    session.update_project_details({"finished_width": 30, "finished_length": 40})
    session.change_project_type(BARNDOMINIUM)
    assert session.project_details.finished_sqft == 1200


def test_type_change_to_single_footprint_recomputes_area(repository):
    session = StatementSession("lead-6", repository)
    session.update_project_details({"finished_width": 30, "finished_length": 40})
    assert session.project_details.sqft == 1200

    session.change_project_type(COMMERCIAL)
    session.auto_calculate_quantities()

    assert session.project_details.sqft == 0
    assert _item_named(session, "Steel Frame Structure").quantity == 0


def test_type_change_to_split_footprint_recomputes_areas(repository):
    session = StatementSession("lead-7", repository, project_type=COMMERCIAL)
    session.update_project_details({"width": 40, "length": 60})
    assert session.project_details.sqft == 2400

    session.change_project_type(BARNDOMINIUM)
    d = session.project_details

    assert (d.finished_sqft, d.unfinished_sqft) == (0, 0)
    assert d.sqft == d.finished_sqft + d.unfinished_sqft
    assert d.width == 40

    session.change_project_type(COMMERCIAL)
    assert session.project_details.sqft == 2400


def test_unknown_type_change_uses_default(garage):
    garage.change_project_type("warehouse")
    assert garage.project_details.project_type == BARNDOMINIUM


# ---------------------------------------------------------------------------
# Lock mode
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("project_id, status, read_only, locked", [
    ("lead-1", "Closed", False, False),
    ("p-1", "Planning", False, False),
    ("p-1", "In Progress", False, True),
    ("lead-1", "Planning", True, True),
])
def test_is_locked(project_id, status, read_only, locked):
    assert is_locked(project_id, status, read_only) is locked


def test_locked_session_ignores_edits(repository):
    session = StatementSession("p-7", repository, locked=True)
    before = [replace(item) for item in session.items]

    session.update_item(session.items[0].id, "quantity", 5)
    session.add_new_item("Finished Space")
    session.delete_item(session.items[0].id)
    session.change_project_type(COMMERCIAL)
    session.set_profit_margin(50)
    session.update_project_details({"finished_width": 10})

    assert session.items == before
    assert session.profit_margin == 20
    assert session.project_details.project_type == BARNDOMINIUM
    assert session.project_details.finished_width == 0


def test_locked_session_cannot_save(repository):
    session = StatementSession("p-7", repository, locked=True)
    with pytest.raises(StatementLockedError):
        session.save()
    assert repository.list_versions("p-7") == []


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def test_local_snapshot_restores_session(repository, garage):
    garage.update_item(garage.items[0].id, "quantity", 12)
    garage.set_profit_margin(15)
    payload = garage.save_statement()
    assert payload["lastSaved"]

    reopened = StatementSession("lead-100", repository)
    assert reopened.items == garage.items
    assert reopened.profit_margin == 15
    assert reopened.project_details.project_type == RESIDENTIAL_GARAGE


def test_load_statement_data_replaces_state(garage, repository):
    other = StatementSession("lead-200", repository, project_type=COMMERCIAL)
    other.update_item(other.items[0].id, "quantity", 1)
    garage.load_statement_data(other.statement.to_dict())
    assert garage.project_details.project_type == COMMERCIAL
    assert garage.items == other.items
    assert garage.total == other.total


def test_save_creates_sequential_versions(garage):
    first = garage.save()
    second = garage.save()
    assert first.statement_name == "Garage - V1"
    assert second.version_number == 2
    assert [v.version_number for v in garage.list_versions()] == [2, 1]


def test_save_while_editing_updates_version(garage):
    first = garage.save()
    garage.save()

    garage.load_version(first.id)
    assert garage.editing_version_id == first.id
    assert garage.is_new_version is False

    garage.update_item(garage.items[0].id, "quantity", 4)
    updated = garage.save()

    assert updated.id == first.id
    assert updated.statement_name == "Garage - Updated"
    assert len(garage.list_versions()) == 2
    assert garage.editing_version_id is None
    assert garage.is_new_version is True


def test_start_new_version_leaves_editing_mode(garage):
    first = garage.save()
    garage.load_version(first.id)
    garage.start_new_version()
    assert garage.save().version_number == 2


def test_load_unknown_version_keeps_state(garage):
    garage.update_item(garage.items[0].id, "quantity", 9)
    before = list(garage.items)
    with pytest.raises(StatementPersistenceError):
        garage.load_version("missing")
    assert garage.items == before
    assert garage.editing_version_id is None


def test_failed_remote_save_leaves_state_unchanged(garage, monkeypatch):
    first = garage.save()
    garage.load_version(first.id)
    saved_at = garage.statement.last_saved

    def refuse(*args, **kwargs):
        raise VersionStoreError("database is locked")

    monkeypatch.setattr(garage.repository, "save_remote_version", refuse)
    with pytest.raises(VersionStoreError):
        garage.save()

    assert garage.statement.last_saved == saved_at
    assert garage.editing_version_id == first.id
    assert garage.is_new_version is False
