"""
Calculator tests: number handling, area derivation, quantity rules, totals
and the customer view.
"""

import json
import sys

import pytest

from fee_statement.database import (
    BARNDOMINIUM,
    COMMERCIAL,
    COMMERCIAL_FEES,
    RESIDENTIAL_GARAGE,
    get_default_fees,
)
from fee_statement.statement_estimator import (
    FeeItem,
    ProjectDetails,
    Statement,
    auto_calculate_quantities,
    build_catalog_items,
    build_customer_summary,
    build_statement_summary,
    calculate_square_footage,
    calculate_totals,
    category_total,
    customer_line_items,
    export_json,
    find_quantity_rule,
    format_number,
    group_by_category,
    main,
    parse_number,
    print_statement,
)


def _item(description, unit, unit_price=1.0, quantity=0.0, category="Test"):
    return FeeItem(id=description, category=category, description=description,
                   unit=unit, quantity=quantity, unit_price=unit_price)


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def test_format_number_rounds_half_up():
    assert format_number(0.125) == 0.13
    assert format_number(28800) == 28800
    assert format_number(1 / 3) == 0.33


@pytest.mark.parametrize("raw, expected", [
    (None, 0.0),
    ("", 0.0),
    ("abc", 0.0),
    ("nan", 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    (-5, 0.0),
    ("12.5", 12.5),
    ("40 ft", 40.0),
    (7, 7.0),
])
def test_parse_number_defaults_invalid_input(raw, expected):
    assert parse_number(raw) == expected


def test_parse_number_custom_default():
    assert parse_number("", default=20.0) == 20.0


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

def test_unknown_project_type_gets_default_catalog():
    assert get_default_fees("warehouse") == get_default_fees(BARNDOMINIUM)


def test_catalog_items_zero_quantity_with_prefixed_ids():
    items = build_catalog_items(COMMERCIAL, "commercial")
    assert len(items) == len(COMMERCIAL_FEES)
    assert items[0].id == "commercial-0"
    assert all(item.quantity == 0 and item.total == 0 for item in items)


# ---------------------------------------------------------------------------
# Areas
# ---------------------------------------------------------------------------

def test_square_footage_single_footprint():
    details = calculate_square_footage(ProjectDetails(project_type=RESIDENTIAL_GARAGE, width=40, length=60))
    assert details.sqft == 2400


def test_square_footage_split_footprint():
    details = calculate_square_footage(ProjectDetails(
        project_type=BARNDOMINIUM,
        finished_width=30, finished_length=40,
        unfinished_width=20.5, unfinished_length=10,
    ))
    assert details.finished_sqft == 1200
    assert details.unfinished_sqft == 205
    assert details.sqft == format_number(details.finished_sqft + details.unfinished_sqft)


def test_square_footage_ignores_width_for_split_type():
    details = calculate_square_footage(ProjectDetails(project_type=BARNDOMINIUM, width=40, length=60))
    assert details.sqft == 0


# ---------------------------------------------------------------------------
# Quantity rules
# ---------------------------------------------------------------------------

def test_structure_item_takes_total_sqft():
    details = calculate_square_footage(ProjectDetails(project_type=RESIDENTIAL_GARAGE, width=40, length=60))
    [lumber] = auto_calculate_quantities([_item("Lumber Frame Structure", "sq ft", 12.00)], details)
    assert lumber.quantity == 2400
    assert lumber.total == 28800


def test_finish_trades_double_on_two_floors():
    details = calculate_square_footage(ProjectDetails(
        project_type=BARNDOMINIUM, finished_width=30, finished_length=40, floors=2))
    drywall, rough_in = auto_calculate_quantities([
        _item("Drywall & Finishing", "finished sq ft", 4.75),
        _item("Electrical Rough-in (Finished)", "finished sq ft", 6.50),
    ], details)
    assert drywall.quantity == 2400
    assert drywall.total == 11400
    assert rough_in.quantity == 1200


def test_overhead_doors_use_door_count():
    [doors] = auto_calculate_quantities([_item("Overhead Doors", "each", 1800)], ProjectDetails(doors=2))
    assert doors.quantity == 2
    assert doors.total == 3600


def test_excavation_adds_overage():
    details = ProjectDetails(project_type=COMMERCIAL, sqft=5000)
    [excavation] = auto_calculate_quantities([_item("Excavation & Grading", "sq ft", 3.50)], details)
    assert excavation.quantity == 5500
    assert excavation.total == 19250


def test_acre_item_defaults_to_one_acre():
    [site] = auto_calculate_quantities([_item("Site Preparation & Clearing", "acre")], ProjectDetails(acres=0))
    assert site.quantity == 1


def test_stairs_only_for_two_floors():
    items = [_item("Interior Stairs", "each", 4500, quantity=3)]
    assert auto_calculate_quantities(items, ProjectDetails(floors=1))[0].quantity == 0
    assert auto_calculate_quantities(items, ProjectDetails(floors=2))[0].quantity == 1


def test_garage_electrical_requires_category():
    garage = _item("Basic Electrical", "sq ft", category="Electrical & Systems")
    other = _item("Basic Electrical", "sq ft", quantity=7, category="Misc")
    updated = auto_calculate_quantities([garage, other], ProjectDetails(sqft=800))
    assert updated[0].quantity == 800
    assert updated[1].quantity == 7


def test_unmatched_sq_ft_item_keeps_manual_quantity():
    # "sq ft" lines never fall through to the description rules
    item = _item("Concrete Sealing", "sq ft", quantity=42)
    assert find_quantity_rule(item).name == "manual_sq_ft"
    assert auto_calculate_quantities([item], ProjectDetails(unfinished_sqft=900))[0].quantity == 42


def test_concrete_sealing_uses_unfinished_area():
    item = _item("Concrete Sealing", "gallon", 1.25)
    assert find_quantity_rule(item).name == "concrete_sealing"
    [sealing] = auto_calculate_quantities([item], ProjectDetails(unfinished_sqft=900))
    assert sealing.quantity == 900
    assert auto_calculate_quantities([item], ProjectDetails(unfinished_sqft=None))[0].quantity == 0


def test_flat_fee_items_quantity_one():
    permit = _item("Delaware Building Permit", "each", 850)
    panel = _item("Commercial Electrical Panel", "each", 5500)
    assert [i.quantity for i in auto_calculate_quantities([permit, panel], ProjectDetails())] == [1, 1]


def test_unmatched_items_are_untouched():
    custom = _item("Landscaping", "each", 250, quantity=3)
    assert find_quantity_rule(custom) is None
    assert auto_calculate_quantities([custom], ProjectDetails(sqft=2000)) == [custom]


def test_auto_calculate_is_idempotent():
    details = calculate_square_footage(ProjectDetails.defaults(BARNDOMINIUM))
    details.finished_width, details.finished_length = 33.3, 41.7
    details = calculate_square_footage(details)
    items = build_catalog_items(BARNDOMINIUM, "default")
    once = auto_calculate_quantities(items, details)
    assert auto_calculate_quantities(once, details) == once


def test_item_total_is_rounded_product():
    item = _item("Odd", "each", unit_price=3.333, quantity=3)
    assert item.total == 10.0


# ---------------------------------------------------------------------------
# Totals and customer view
# ---------------------------------------------------------------------------

def test_totals_with_profit_margin():
    totals = calculate_totals([_item("Shell", "each", 50000, quantity=1)], 20)
    assert totals.subtotal == 50000
    assert totals.profit == 10000
    assert totals.total == 60000


def test_totals_of_empty_statement():
    totals = calculate_totals([], 20)
    assert (totals.subtotal, totals.profit, totals.total) == (0, 0, 0)


def test_group_by_category_keeps_first_seen_order():
    items = [_item("a", "each", category="B"), _item("b", "each", category="A"), _item("c", "each", category="B")]
    grouped = group_by_category(items)
    assert list(grouped) == ["B", "A"]
    assert [i.id for i in grouped["B"]] == ["a", "c"]


def test_category_total_sums_line_totals():
    assert category_total([_item("a", "each", 10.5, 2), _item("b", "each", 4, 1)]) == 25


def test_customer_lines_are_marked_up_and_skip_empty_rows():
    items = [
        _item("Door", "each", 100, quantity=1, category="Structure"),
        _item("Unused", "each", 999, quantity=0, category="Structure"),
        _item("Permit", "each", 0, quantity=0, category="Permits"),
    ]
    sections = customer_line_items(items, 20)
    assert [s["category"] for s in sections] == ["Structure"]
    [row] = sections[0]["items"]
    assert row["unit_price"] == 120
    assert row["line_cost"] == 120
    assert sections[0]["category_total"] == 120


def test_customer_summary_has_no_margin_breakdown():
    statement = Statement.new("lead-1", RESIDENTIAL_GARAGE)
    statement.items[0].quantity = 10
    summary = build_customer_summary(statement)
    assert "totals" not in summary
    assert summary["total"] == calculate_totals(statement.items, 20).total


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------

def test_statement_round_trip():
    statement = Statement.new("lead-9", BARNDOMINIUM)
    statement.project_details = calculate_square_footage(statement.project_details)
    statement.items = auto_calculate_quantities(statement.items, statement.project_details)
    assert Statement.from_dict(statement.to_dict()) == statement


def test_wire_format_uses_camel_case():
    data = Statement.new("lead-9", BARNDOMINIUM).to_dict()
    assert {"projectId", "items", "projectDetails", "profitMargin"} <= set(data)
    assert "unitPrice" in data["items"][0]
    assert "walkDoors" in data["projectDetails"]


def test_stored_item_total_is_ignored():
    item = FeeItem.from_dict({"id": "x", "category": "c", "description": "d", "unit": "each",
                              "quantity": 2, "unitPrice": 10, "total": 999})
    assert item.total == 20


def test_missing_split_areas_load_as_none():
    details = ProjectDetails.from_dict({"projectType": COMMERCIAL, "sqft": 100})
    assert details.finished_sqft is None
    assert "finishedSqft" not in details.to_dict()


@pytest.mark.parametrize("payload", [
    [],
    {"items": "nope", "projectDetails": {}},
    {"items": [], "projectId": "p"},
    {"items": [{"id": "x"}], "projectDetails": {"projectType": COMMERCIAL}, "projectId": "p"},
])
def test_malformed_statement_raises_value_error(payload):
    with pytest.raises(ValueError):
        Statement.from_dict(payload)


# ---------------------------------------------------------------------------
# Reporting / CLI
# ---------------------------------------------------------------------------

def test_print_statement_shows_totals(capsys):
    statement = Statement.new("lead-3", COMMERCIAL)
    statement.items[0].quantity = 2
    print_statement(build_statement_summary(statement))
    out = capsys.readouterr().out
    assert "Commercial Building Construction Estimate" in out
    assert "TOTAL PROJECT COST" in out
    assert f"TOTAL PROJECT COST:      ${12000:>12,.2f}" in out


def test_cli_loads_and_exports(tmp_path, monkeypatch, capsys):
    source = tmp_path / "in.json"
    target = tmp_path / "out.json"
    statement = Statement.new("lead-4", RESIDENTIAL_GARAGE)
    export_json(statement, str(source))

    monkeypatch.setattr(sys, "argv", ["statement_estimator", "--load", str(source),
                                      "--json", str(target), "--customer"])
    main()

    out = capsys.readouterr().out
    assert "Profit Margin" not in out
    assert json.loads(target.read_text())["projectId"] == "lead-4"
