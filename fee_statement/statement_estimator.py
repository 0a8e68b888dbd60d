"""
Statement Estimator - Fee statement quantity takeoff and cost estimation.

Derives building areas from project dimensions, fills line-item quantities
from an ordered rule table keyed by unit and description, and rolls the line
items up into subtotal / profit / total.

All calculators here are pure: they take items and project details and hand
back new values. State lives in statement_session.py.

Usage:
    python -m fee_statement.statement_estimator
    python -m fee_statement.statement_estimator --type commercial --json output.json
    python -m fee_statement.statement_estimator --load statement-lead-42.json --customer
"""

import math
import json
import re
import sys
from dataclasses import dataclass, field, fields, replace
from typing import Callable, NamedTuple

from fee_statement.database import (
    DEFAULT_COUNTS,
    DEFAULT_FINISHED_HEIGHT_FT,
    DEFAULT_HEIGHT_FT,
    DEFAULT_PROFIT_MARGIN,
    DEFAULT_PROJECT_TYPE,
    DEFAULT_UNFINISHED_HEIGHT_FT,
    PROJECT_TYPE_LABELS,
    PROJECT_TYPES,
    SPLIT_PROJECT_TYPE,
    STATEMENT_NOTES,
    get_default_fees,
)


# ---------------------------------------------------------------------------
# Numeric normalisation
# ---------------------------------------------------------------------------

# Leading numeric portion of user text ("12.5 ft" -> 12.5)
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def format_number(value: float) -> float:
    """Round to 2 decimals, halves rounded up (not banker's rounding)."""
    return math.floor(value * 100 + 0.5) / 100


def parse_number(value, default: float = 0.0) -> float:
    """
    Parse-or-default for every numeric input boundary.

    Numeric fields have no "invalid" state: blank, non-numeric, negative and
    non-finite input all normalise to ``default``. Text is read up to the
    first non-numeric character, so "40 ft" parses as 40.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value).strip())
        if not match:
            return default
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number) or number < 0:
        return default
    return number


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass
class FeeItem:
    """One priced line in a statement."""

    id: str
    category: str
    description: str
    unit: str
    quantity: float = 0.0
    unit_price: float = 0.0

    @property
    def total(self) -> float:
        return format_number(self.quantity * self.unit_price)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "unit": self.unit,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeeItem":
        # A stored "total" is ignored; it is always derived.
        if not isinstance(data, dict):
            raise ValueError(f"Fee item must be an object, got {type(data).__name__}")
        try:
            return cls(
                id=str(data["id"]),
                category=str(data["category"]),
                description=str(data["description"]),
                unit=str(data["unit"]),
                quantity=parse_number(data.get("quantity")),
                unit_price=parse_number(data.get("unitPrice")),
            )
        except KeyError as e:
            raise ValueError(f"Fee item missing field {e}") from e


@dataclass
class ProjectDetails:
    """Configuration driving area derivation and quantity auto-calculation."""

    project_type: str = DEFAULT_PROJECT_TYPE

    # --- Derived areas (never set directly; see calculate_square_footage) ---
    sqft: float = 0.0
    finished_sqft: float | None = 0.0
    unfinished_sqft: float | None = 0.0

    # --- Single footprint (garage / commercial) ---
    width: float = 0.0
    length: float = 0.0
    height: float = 0.0

    # --- Split footprint (barndominium) ---
    finished_width: float = 0.0
    finished_length: float = 0.0
    finished_height: float = 0.0
    unfinished_width: float = 0.0
    unfinished_length: float = 0.0
    unfinished_height: float = 0.0
    floors: int = 1

    # --- Direct quantity sources ---
    acres: float = 0.0
    doors: float = 0.0
    walk_doors: float = 0.0
    kitchen_cabinets: float = 0.0  # linear ft
    bathrooms: float = 0.0

    @classmethod
    def defaults(cls, project_type: str = DEFAULT_PROJECT_TYPE) -> "ProjectDetails":
        return cls(
            project_type=project_type,
            height=DEFAULT_HEIGHT_FT.get(project_type, DEFAULT_HEIGHT_FT[DEFAULT_PROJECT_TYPE]),
            finished_height=DEFAULT_FINISHED_HEIGHT_FT,
            unfinished_height=DEFAULT_UNFINISHED_HEIGHT_FT,
            **DEFAULT_COUNTS,
        )

    @property
    def is_split(self) -> bool:
        return self.project_type == SPLIT_PROJECT_TYPE

    def to_dict(self) -> dict:
        # None means "not applicable to this project type" and is left out.
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                out[_camel(f.name)] = value
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectDetails":
        if not isinstance(data, dict):
            raise ValueError(f"Project details must be an object, got {type(data).__name__}")
        if "projectType" not in data:
            raise ValueError("Project details missing field 'projectType'")

        kwargs = {"project_type": str(data["projectType"])}
        for f in fields(cls):
            if f.name == "project_type":
                continue
            key = _camel(f.name)
            if f.name in _OPTIONAL_AREA_FIELDS:
                raw = data.get(key)
                kwargs[f.name] = None if raw is None else parse_number(raw)
            elif f.name == "floors":
                kwargs[f.name] = normalise_floors(data.get(key, 1))
            elif key in data:
                kwargs[f.name] = parse_number(data[key])
        return cls(**kwargs)


_OPTIONAL_AREA_FIELDS = frozenset({"finished_sqft", "unfinished_sqft"})

# Editing any of these triggers area recomputation
DIMENSION_FIELDS = frozenset({
    "width", "length", "height",
    "finished_width", "finished_length", "finished_height",
    "unfinished_width", "unfinished_length", "unfinished_height",
})

# Output of calculate_square_footage only
AREA_FIELDS = frozenset({"sqft", "finished_sqft", "unfinished_sqft"})

# Free-entry fields consumed directly by the auto-calculator
COUNT_FIELDS = frozenset({"floors", "acres", "doors", "walk_doors", "kitchen_cabinets", "bathrooms"})


def normalise_floors(value) -> int:
    """Floors is 1 or 2; anything else is clamped into that range."""
    return 2 if parse_number(value, default=1) >= 2 else 1


@dataclass
class Statement:
    """The full priced proposal for a project."""

    project_id: str
    items: list[FeeItem] = field(default_factory=list)
    project_details: ProjectDetails = field(default_factory=ProjectDetails)
    profit_margin: float = DEFAULT_PROFIT_MARGIN
    last_saved: str | None = None

    @classmethod
    def new(cls, project_id: str, project_type: str = DEFAULT_PROJECT_TYPE,
            profit_margin: float = DEFAULT_PROFIT_MARGIN) -> "Statement":
        """Catalog defaults for a project type, quantities zeroed."""
        return cls(
            project_id=project_id,
            items=build_catalog_items(project_type, "default"),
            project_details=ProjectDetails.defaults(project_type),
            profit_margin=profit_margin,
        )

    def to_dict(self) -> dict:
        out = {
            "projectId": self.project_id,
            "items": [item.to_dict() for item in self.items],
            "projectDetails": self.project_details.to_dict(),
            "profitMargin": format_number(self.profit_margin),
        }
        if self.last_saved:
            out["lastSaved"] = self.last_saved
        return out

    @classmethod
    def from_dict(cls, data: dict, project_id: str | None = None) -> "Statement":
        """
        Rebuild a statement from a cache snapshot or a version payload.

        Version payloads carry only {items, projectDetails, profitMargin}, so
        the project id may be supplied by the caller. Raises ValueError when
        the payload does not have the statement shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Statement must be an object, got {type(data).__name__}")
        items = data.get("items")
        if not isinstance(items, list):
            raise ValueError("Statement missing 'items' list")
        if "projectDetails" not in data:
            raise ValueError("Statement missing 'projectDetails'")

        pid = project_id if project_id is not None else data.get("projectId")
        if pid is None:
            raise ValueError("Statement missing 'projectId'")

        return cls(
            project_id=str(pid),
            items=[FeeItem.from_dict(item) for item in items],
            project_details=ProjectDetails.from_dict(data["projectDetails"]),
            profit_margin=parse_number(data.get("profitMargin"), default=DEFAULT_PROFIT_MARGIN),
            last_saved=data.get("lastSaved"),
        )

    def payload(self) -> dict:
        """The {items, projectDetails, profitMargin} body stored with a version."""
        snapshot = self.to_dict()
        return {key: snapshot[key] for key in ("items", "projectDetails", "profitMargin")}


# ---------------------------------------------------------------------------
# Fee Catalog -> line items
# ---------------------------------------------------------------------------

def build_catalog_items(project_type: str, id_prefix: str) -> list[FeeItem]:
    """Seed line items from the catalog; ids are '{id_prefix}-{index}'."""
    return [
        FeeItem(id=f"{id_prefix}-{index}", category=category, description=description,
                unit=unit, quantity=0.0, unit_price=unit_price)
        for index, (category, description, unit, unit_price) in enumerate(get_default_fees(project_type))
    ]


def project_type_label(project_type: str) -> str:
    return PROJECT_TYPE_LABELS.get(project_type, PROJECT_TYPE_LABELS[DEFAULT_PROJECT_TYPE])


def is_known_project_type(project_type: str) -> bool:
    return project_type in PROJECT_TYPES


# ---------------------------------------------------------------------------
# Dimension / Area Calculator
# ---------------------------------------------------------------------------

def calculate_square_footage(details: ProjectDetails) -> ProjectDetails:
    """
    Recompute derived areas from dimensions. Missing dimensions count as 0.

    Split type: finished and unfinished footprints are computed separately
    and sqft is their sum. Other types: sqft = width x length.
    """
    if details.is_split:
        finished = format_number((details.finished_width or 0) * (details.finished_length or 0))
        unfinished = format_number((details.unfinished_width or 0) * (details.unfinished_length or 0))
        return replace(
            details,
            finished_sqft=finished,
            unfinished_sqft=unfinished,
            sqft=format_number(finished + unfinished),
        )

    return replace(details, sqft=format_number((details.width or 0) * (details.length or 0)))


# ---------------------------------------------------------------------------
# Quantity Auto-Calculator
# ---------------------------------------------------------------------------

class QuantityRule(NamedTuple):
    name: str
    matches: Callable[[FeeItem], bool]
    # Returns the new quantity, or None to keep the manual quantity.
    quantity: Callable[[FeeItem, ProjectDetails], float | None]


EXCAVATION_OVERAGE = 1.10

STRUCTURE_KEYWORDS = (
    "Lumber Frame", "Metal Roof", "Metal Siding", "Steel Frame",
    "Commercial Roof", "Commercial Siding", "Roof System", "Siding",
)

# Finish trades needed on both levels of a 2-floor build
TWO_FLOOR_FINISH_KEYWORDS = ("Drywall", "Paint", "Flooring")

FLAT_FEE_KEYWORDS = (
    "Building Permit", "Impact Fees", "Inspections", "Project Manager",
    "Project Management", "Septic System Connection", "Electrical Panel",
)


def _sq_ft_with(*keywords: str) -> Callable[[FeeItem], bool]:
    return lambda item: item.unit == "sq ft" and any(k in item.description for k in keywords)


def _unit_is(unit: str) -> Callable[[FeeItem], bool]:
    return lambda item: item.unit == unit


def _mentions(*keywords: str) -> Callable[[FeeItem], bool]:
    return lambda item: any(k in item.description for k in keywords)


def _garage_electrical(item: FeeItem) -> bool:
    return (item.unit == "sq ft" and "Basic Electrical" in item.description
            and item.category == "Electrical & Systems")


def _flat_fee(item: FeeItem) -> bool:
    return item.unit == "each" and any(k in item.description for k in FLAT_FEE_KEYWORDS)


def _total_sqft(item: FeeItem, d: ProjectDetails) -> float:
    return d.sqft


def _excavation_sqft(item: FeeItem, d: ProjectDetails) -> float:
    return d.sqft * EXCAVATION_OVERAGE


def _keep_manual(item: FeeItem, d: ProjectDetails) -> None:
    return None


def _finished_sqft(item: FeeItem, d: ProjectDetails) -> float:
    base = d.finished_sqft or 0
    if d.floors == 2 and any(k in item.description for k in TWO_FLOOR_FINISH_KEYWORDS):
        return base * 2
    # Rough-in and insulation are priced on the footprint
    return base


def _unfinished_sqft(item: FeeItem, d: ProjectDetails) -> float:
    return d.unfinished_sqft or 0


def _acres(item: FeeItem, d: ProjectDetails) -> float:
    return d.acres or 1


def _count(attr: str) -> Callable[[FeeItem, ProjectDetails], float]:
    return lambda item, d: getattr(d, attr) or 0


def _stairs(item: FeeItem, d: ProjectDetails) -> float:
    return 1 if d.floors == 2 else 0


def _one(item: FeeItem, d: ProjectDetails) -> float:
    return 1


# Evaluated top to bottom; the first match wins.
# Format: (name, match on item, quantity source)
QUANTITY_RULES: list[QuantityRule] = [
    # --- unit "sq ft", keyed by description ---
    QuantityRule("structure_sqft", _sq_ft_with(*STRUCTURE_KEYWORDS), _total_sqft),
    QuantityRule("site_prep_sqft", _sq_ft_with("Site Preparation"), _total_sqft),
    QuantityRule("slab_sqft", _sq_ft_with("Concrete Slab"), _total_sqft),
    QuantityRule("vapor_barrier_sqft", _sq_ft_with("Vapor Barrier"), _total_sqft),
    QuantityRule("garage_electrical_sqft", _garage_electrical, _total_sqft),
    QuantityRule("commercial_electrical_sqft", _sq_ft_with("Commercial Electrical"), _total_sqft),
    QuantityRule("hvac_sqft", _sq_ft_with("HVAC System"), _total_sqft),
    QuantityRule("fire_safety_sqft", _sq_ft_with("Fire Safety Systems"), _total_sqft),
    QuantityRule("excavation_sqft", _sq_ft_with("Excavation", "Grading"), _excavation_sqft),
    # any other "sq ft" line is a manual entry and skips the description rules
    QuantityRule("manual_sq_ft", _unit_is("sq ft"), _keep_manual),

    # --- unit-based ---
    QuantityRule("finished_sqft", _unit_is("finished sq ft"), _finished_sqft),
    QuantityRule("unfinished_sqft", _unit_is("unfinished sq ft"), _unfinished_sqft),
    QuantityRule("site_acres", _unit_is("acre"), _acres),

    # --- description-only ---
    QuantityRule("overhead_doors", _mentions("Overhead Doors"), _count("doors")),
    QuantityRule("walk_doors", _mentions("Walk-in Doors", "Entry Doors"), _count("walk_doors")),
    QuantityRule("kitchen_cabinets", _mentions("Kitchen Cabinets"), _count("kitchen_cabinets")),
    QuantityRule("bathroom_vanities", _mentions("Bathroom Vanities"), _count("bathrooms")),
    QuantityRule("interior_stairs", _mentions("Interior Stairs"), _stairs),
    QuantityRule("flat_fee", _flat_fee, _one),
    QuantityRule("concrete_sealing", _mentions("Concrete Sealing"), _unfinished_sqft),
]


def find_quantity_rule(item: FeeItem) -> QuantityRule | None:
    """Return the rule that governs an item's quantity, or None."""
    for rule in QUANTITY_RULES:
        if rule.matches(item):
            return rule
    return None


def auto_calculate_quantities(items: list[FeeItem], details: ProjectDetails) -> list[FeeItem]:
    """
    Re-derive quantities for rule-matched items from project details.

    Matched items get a rounded quantity (and so a recomputed total);
    unmatched items, and items whose rule keeps the manual entry, come back
    unchanged. Repeating the call with the same details changes nothing.
    """
    updated = []
    for item in items:
        rule = find_quantity_rule(item)
        quantity = rule.quantity(item, details) if rule else None
        if quantity is None:
            updated.append(item)
            continue
        updated.append(replace(item, quantity=format_number(quantity)))
    return updated


# ---------------------------------------------------------------------------
# Totals Calculator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatementTotals:
    subtotal: float
    profit: float
    total: float


def calculate_totals(items: list[FeeItem], profit_margin: float) -> StatementTotals:
    subtotal = format_number(sum(item.total for item in items))
    profit = format_number(subtotal * (profit_margin / 100))
    return StatementTotals(subtotal=subtotal, profit=profit, total=format_number(subtotal + profit))


def group_by_category(items: list[FeeItem]) -> dict[str, list[FeeItem]]:
    """Group items by category, keeping first-seen category order."""
    grouped: dict[str, list[FeeItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def category_total(items: list[FeeItem]) -> float:
    return format_number(sum(item.total for item in items))


def customer_line_items(items: list[FeeItem], profit_margin: float) -> list[dict]:
    """
    Customer-facing rows: margin folded into every line.

    Only lines with a quantity are shown. Unit price, line total and
    category total are marked up by (1 + margin/100); no subtotal or profit
    figure is produced.
    """
    multiplier = 1 + profit_margin / 100
    sections = []
    for category, category_items in group_by_category(items).items():
        billable = [item for item in category_items if item.quantity > 0]
        if not billable:
            continue
        sections.append({
            "category": category,
            "items": [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit": item.unit,
                    "unit_price": format_number(item.unit_price * multiplier),
                    "line_cost": format_number(item.total * multiplier),
                }
                for item in billable
            ],
            "category_total": format_number(sum(item.total * multiplier for item in category_items)),
        })
    return sections


# ---------------------------------------------------------------------------
# Statement summaries (consumed by templates and the CLI)
# ---------------------------------------------------------------------------

def _project_summary(d: ProjectDetails) -> dict:
    summary = {
        "project_type": d.project_type,
        "project_type_label": project_type_label(d.project_type),
        "sqft": d.sqft,
        "acres": format_number(d.acres),
        "doors": d.doors,
        "walk_doors": d.walk_doors,
        "kitchen_cabinets": d.kitchen_cabinets,
        "bathrooms": d.bathrooms,
    }
    if d.is_split:
        summary.update({
            "finished_sqft": d.finished_sqft or 0,
            "unfinished_sqft": d.unfinished_sqft or 0,
            "floors": d.floors,
        })
    return summary


def build_statement_summary(statement: Statement) -> dict:
    """
    Internal statement view.

    Returns a structured dict with:
      - project_details: project type label, areas and counts
      - sections: per category, the lines with a quantity and the category total
      - totals: subtotal, profit margin, profit and total
      - notes: standard statement notes
    """
    totals = calculate_totals(statement.items, statement.profit_margin)
    sections = []
    for category, category_items in group_by_category(statement.items).items():
        sections.append({
            "category": category,
            "items": [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit": item.unit,
                    "unit_price": item.unit_price,
                    "line_cost": item.total,
                }
                for item in category_items if item.quantity > 0
            ],
            "category_total": category_total(category_items),
        })

    return {
        "project_id": statement.project_id,
        "project_details": _project_summary(statement.project_details),
        "sections": sections,
        "totals": {
            "subtotal": totals.subtotal,
            "profit_margin": format_number(statement.profit_margin),
            "profit": totals.profit,
            "total": totals.total,
        },
        "notes": list(STATEMENT_NOTES) + [
            f"This estimate includes a {format_number(statement.profit_margin):g}% profit margin",
        ],
    }


def build_customer_summary(statement: Statement) -> dict:
    """Customer view: marked-up sections and a single total."""
    totals = calculate_totals(statement.items, statement.profit_margin)
    return {
        "project_id": statement.project_id,
        "project_details": _project_summary(statement.project_details),
        "sections": customer_line_items(statement.items, statement.profit_margin),
        "total": totals.total,
        "notes": list(STATEMENT_NOTES),
    }


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def print_statement(summary: dict) -> None:
    """Pretty-print a statement summary (internal or customer)."""
    meta = summary["project_details"]

    print("=" * 72)
    print("  STATEMENT OF FEES")
    print(f"  {meta['project_type_label']} Construction Estimate")
    print("=" * 72)

    print(f"\n  Project       : {summary['project_id']}")
    print(f"  Square Feet   : {meta['sqft']:,.0f} sq ft")
    if "finished_sqft" in meta:
        print(f"  Finished      : {meta['finished_sqft']:,.0f} sq ft  ({meta['floors']} floor(s))")
        print(f"  Unfinished    : {meta['unfinished_sqft']:,.0f} sq ft")
    print(f"  Site Size     : {meta['acres']:g} acres")
    print(f"  Overhead Doors: {meta['doors']:g}  |  Walk-in Doors: {meta['walk_doors']:g}")

    for section in summary["sections"]:
        print(f"\n  {'-' * 68}")
        print(f"  {section['category'].upper()}")
        print(f"  {'-' * 68}")
        for item in section["items"]:
            print(f"    {item['description']}")
            print(f"      {item['quantity']:,g} {item['unit']}  @  ${item['unit_price']:,.2f}"
                  f"  =  ${item['line_cost']:,.2f}")
        print(f"    {'Category Total:':>50} ${section['category_total']:>12,.2f}")

    print(f"\n{'=' * 72}")
    if "totals" in summary:
        totals = summary["totals"]
        print(f"  Construction Subtotal:   ${totals['subtotal']:>12,.2f}")
        print(f"  Profit Margin ({totals['profit_margin']:g}%):  ${totals['profit']:>12,.2f}")
        print(f"  {'-' * 50}")
        print(f"  TOTAL PROJECT COST:      ${totals['total']:>12,.2f}")
    else:
        print(f"  TOTAL PROJECT COST:      ${summary['total']:>12,.2f}")
    print("=" * 72)

    print("\n  Notes:")
    for note in summary["notes"]:
        print(f"    - {note}")


def export_json(statement: Statement, output_path: str) -> None:
    """Write the statement snapshot to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(statement.to_dict(), f, indent=2, ensure_ascii=False)
    print(f"\nJSON statement saved to: {output_path}")


def load_statement(json_path: str) -> Statement:
    """Load a statement snapshot written by export_json() or the local cache."""
    with open(json_path, "r", encoding="utf-8") as f:
        return Statement.from_dict(json.load(f))


# ---------------------------------------------------------------------------
# CLI - interactive dimension input
# ---------------------------------------------------------------------------

def _input_float(prompt: str, default: float | None = None) -> float:
    """Prompt for a non-negative number with optional default."""
    suffix = f" [{default:g}]" if default is not None else ""
    while True:
        raw = input(f"  {prompt}{suffix}: ").strip()
        if not raw and default is not None:
            return default
        value = parse_number(raw, default=-1.0)
        if value >= 0:
            return value
        print("    Please enter a number.")


def _arg_value(flag: str) -> str | None:
    if flag in sys.argv:
        idx = sys.argv.index(flag)
        if idx + 1 < len(sys.argv):
            return sys.argv[idx + 1]
    return None


def main():
    json_output = _arg_value("--json")
    load_path = _arg_value("--load")
    project_type = _arg_value("--type") or DEFAULT_PROJECT_TYPE
    customer_view = "--customer" in sys.argv

    if load_path:
        statement = load_statement(load_path)
    else:
        if not is_known_project_type(project_type):
            print(f"Unknown project type '{project_type}', using {DEFAULT_PROJECT_TYPE}.")
            project_type = DEFAULT_PROJECT_TYPE

        print("=" * 60)
        print(f"  STATEMENT OF FEES - {project_type_label(project_type)}")
        print("=" * 60)

        statement = Statement.new("cli", project_type)
        d = statement.project_details

        print("\n[DIMENSIONS]")
        if d.is_split:
            d.finished_width = _input_float("Finished width (ft)", 0.0)
            d.finished_length = _input_float("Finished length (ft)", 0.0)
            d.unfinished_width = _input_float("Unfinished width (ft)", 0.0)
            d.unfinished_length = _input_float("Unfinished length (ft)", 0.0)
            d.floors = normalise_floors(_input_float("Floors (1 or 2)", 1))
        else:
            d.width = _input_float("Width (ft)", 0.0)
            d.length = _input_float("Length (ft)", 0.0)

        print("\n[COUNTS]")
        d.acres = _input_float("Site size (acres)", d.acres)
        d.doors = _input_float("Overhead doors", d.doors)
        d.walk_doors = _input_float("Walk-in doors", d.walk_doors)
        if d.is_split:
            d.kitchen_cabinets = _input_float("Kitchen cabinets (linear ft)", d.kitchen_cabinets)
            d.bathrooms = _input_float("Bathrooms", d.bathrooms)

        statement.profit_margin = format_number(
            _input_float("Profit margin (%)", statement.profit_margin))
        statement.project_details = calculate_square_footage(d)
        statement.items = auto_calculate_quantities(statement.items, statement.project_details)

    print()
    if customer_view:
        print_statement(build_customer_summary(statement))
    else:
        print_statement(build_statement_summary(statement))

    if json_output:
        export_json(statement, json_output)


if __name__ == "__main__":
    main()
