"""
Statement session - the editable, in-memory statement for one open project.

Wraps a Statement with the editing operations (line items, project type,
project details, margin), memoised totals, lock mode, and the save / version
workflow against a StatementRepository.
"""

import logging
from dataclasses import fields, replace
from uuid import uuid4

from fee_statement.database import DEFAULT_PROJECT_TYPE, SPLIT_PROJECT_TYPE
from fee_statement.statement_estimator import (
    AREA_FIELDS,
    DIMENSION_FIELDS,
    FeeItem,
    ProjectDetails,
    Statement,
    StatementTotals,
    auto_calculate_quantities,
    build_catalog_items,
    build_customer_summary,
    build_statement_summary,
    calculate_square_footage,
    calculate_totals,
    category_total,
    format_number,
    group_by_category,
    is_known_project_type,
    normalise_floors,
    parse_number,
)
from fee_statement.statement_store import (
    StatementLockedError,
    StatementPersistenceError,
    StatementRepository,
    StatementVersion,
    get_default_profit_margin,
)

logger = logging.getLogger(__name__)

# Projects in these states can still be edited
EDITABLE_STATUS = "Planning"
LEAD_PREFIX = "lead-"

# Editable line-item fields; camelCase aliases accepted from the wire format
ITEM_TEXT_FIELDS = {"description": "description", "unit": "unit"}
ITEM_NUMBER_FIELDS = {"quantity": "quantity", "unit_price": "unit_price", "unitPrice": "unit_price"}

_DETAIL_FIELDS = {f.name for f in fields(ProjectDetails)} - {"project_type"}
_DETAIL_ALIASES = {
    "finishedWidth": "finished_width", "finishedLength": "finished_length",
    "finishedHeight": "finished_height", "unfinishedWidth": "unfinished_width",
    "unfinishedLength": "unfinished_length", "unfinishedHeight": "unfinished_height",
    "finishedSqft": "finished_sqft", "unfinishedSqft": "unfinished_sqft",
    "walkDoors": "walk_doors", "kitchenCabinets": "kitchen_cabinets",
}


def is_locked(project_id: str, status: str | None, read_only: bool = False) -> bool:
    """Read-only views, and non-lead projects past planning, cannot be edited."""
    return read_only or (not project_id.startswith(LEAD_PREFIX) and status != EDITABLE_STATUS)


class StatementSession:
    def __init__(self, project_id: str, repository: StatementRepository,
                 project_type: str = DEFAULT_PROJECT_TYPE, project_name: str = "",
                 locked: bool = False):
        self.project_id = project_id
        self.project_name = project_name or project_id
        self.repository = repository
        self.locked = locked

        # Version editing state
        self.editing_version_id: str | None = None
        self.is_new_version = True

        self._totals: StatementTotals | None = None

        snapshot = repository.load_local_snapshot(project_id)
        if snapshot is not None:
            logger.info(f"Restored cached statement for {project_id} ({len(snapshot.items)} items)")
            self.statement = snapshot
        else:
            if not is_known_project_type(project_type):
                logger.warning(f"Unknown project type '{project_type}', using {DEFAULT_PROJECT_TYPE}")
                project_type = DEFAULT_PROJECT_TYPE
            self.statement = Statement.new(project_id, project_type, get_default_profit_margin())

    # --- State accessors ---

    @property
    def items(self) -> list[FeeItem]:
        return self.statement.items

    @property
    def project_details(self) -> ProjectDetails:
        return self.statement.project_details

    @property
    def profit_margin(self) -> float:
        return self.statement.profit_margin

    def find_item(self, item_id: str) -> FeeItem | None:
        return next((item for item in self.statement.items if item.id == item_id), None)

    def _blocked(self, operation: str) -> bool:
        if self.locked:
            logger.info(f"Statement {self.project_id} is locked; ignoring {operation}")
        return self.locked

    def _set_items(self, items: list[FeeItem]) -> None:
        self.statement.items = items
        self._totals = None

    # --- Line items ---

    def update_item(self, item_id: str, field: str, value) -> FeeItem | None:
        """
        Set one field on a line item. Numbers are parsed-or-zero and rounded;
        the item total follows from quantity and unit price.
        """
        if field in ITEM_NUMBER_FIELDS:
            attr, new_value = ITEM_NUMBER_FIELDS[field], format_number(parse_number(value))
        elif field in ITEM_TEXT_FIELDS:
            attr, new_value = ITEM_TEXT_FIELDS[field], "" if value is None else str(value)
        else:
            raise ValueError(f"Line item field '{field}' is not editable")

        if self._blocked(f"update of {item_id}"):
            return None

        item = self.find_item(item_id)
        if item is None:
            logger.info(f"No line item {item_id} in statement {self.project_id}")
            return None

        updated = replace(item, **{attr: new_value})
        self._set_items([updated if i.id == item_id else i for i in self.statement.items])
        return updated

    def add_new_item(self, category: str) -> FeeItem | None:
        if self._blocked("add item"):
            return None
        item = FeeItem(id=f"custom-{uuid4().hex[:12]}", category=category,
                       description="New Item", unit="each", quantity=0.0, unit_price=0.0)
        self._set_items(self.statement.items + [item])
        return item

    def delete_item(self, item_id: str) -> bool:
        if self._blocked(f"delete of {item_id}"):
            return False
        remaining = [item for item in self.statement.items if item.id != item_id]
        if len(remaining) == len(self.statement.items):
            logger.info(f"No line item {item_id} to delete in statement {self.project_id}")
            return False
        self._set_items(remaining)
        return True

    def auto_calculate_quantities(self) -> list[FeeItem]:
        if self._blocked("auto-calculate"):
            return self.statement.items
        self._set_items(auto_calculate_quantities(self.statement.items, self.statement.project_details))
        return self.statement.items

    # --- Project configuration ---

    def change_project_type(self, new_type: str) -> None:
        """Swap in the catalog for new_type. Every line item, custom ones included, is replaced."""
        if self._blocked("project type change"):
            return
        if not is_known_project_type(new_type):
            logger.warning(f"Unknown project type '{new_type}', using {DEFAULT_PROJECT_TYPE}")
            new_type = DEFAULT_PROJECT_TYPE

        d = self.statement.project_details
        keep_split = new_type == SPLIT_PROJECT_TYPE
        # Areas always follow the dimensions of the new type
        self.statement.project_details = calculate_square_footage(replace(
            d,
            project_type=new_type,
            finished_sqft=d.finished_sqft if keep_split else None,
            unfinished_sqft=d.unfinished_sqft if keep_split else None,
        ))
        self._set_items(build_catalog_items(new_type, new_type))
        logger.info(f"Statement {self.project_id} switched to {new_type}")

    def update_project_details(self, updates: dict) -> ProjectDetails:
        """
        Merge field updates into the project details.

        Values are coerced (parse-or-zero; floors clamped to 1 or 2). Areas
        are recomputed only when a dimension field is part of the update.
        Derived area fields cannot be set and are skipped.
        """
        changes = {}
        for key, value in updates.items():
            name = _DETAIL_ALIASES.get(key, key)
            if name in AREA_FIELDS:
                logger.debug(f"Ignoring derived field {key}")
                continue
            if name in ("project_type", "projectType"):
                raise ValueError("Use change_project_type() to change the project type")
            if name not in _DETAIL_FIELDS:
                raise ValueError(f"Unknown project detail field '{key}'")
            changes[name] = normalise_floors(value) if name == "floors" else parse_number(value)

        if self._blocked("project details update"):
            return self.statement.project_details

        details = replace(self.statement.project_details, **changes)
        if DIMENSION_FIELDS.intersection(changes):
            details = calculate_square_footage(details)
        self.statement.project_details = details
        return details

    def set_profit_margin(self, value) -> float:
        if self._blocked("profit margin change"):
            return self.statement.profit_margin
        self.statement.profit_margin = format_number(parse_number(value))
        self._totals = None
        return self.statement.profit_margin

    # --- Derived values ---

    @property
    def totals(self) -> StatementTotals:
        if self._totals is None:
            self._totals = calculate_totals(self.statement.items, self.statement.profit_margin)
        return self._totals

    @property
    def subtotal(self) -> float:
        return self.totals.subtotal

    @property
    def profit(self) -> float:
        return self.totals.profit

    @property
    def total(self) -> float:
        return self.totals.total

    def grouped_items(self) -> dict[str, list[FeeItem]]:
        return group_by_category(self.statement.items)

    def category_totals(self) -> dict[str, float]:
        return {category: category_total(items) for category, items in self.grouped_items().items()}

    def statement_summary(self) -> dict:
        return build_statement_summary(self.statement)

    def customer_statement(self) -> dict:
        return build_customer_summary(self.statement)

    def to_dict(self) -> dict:
        totals = self.totals
        return {
            "statement": self.statement.to_dict(),
            "totals": {"subtotal": totals.subtotal, "profit": totals.profit, "total": totals.total},
            "locked": self.locked,
            "editingVersionId": self.editing_version_id,
            "isNewVersion": self.is_new_version,
        }

    # --- Persistence ---

    def save_statement(self) -> dict:
        """Write the local snapshot and return it."""
        if self.locked:
            raise StatementLockedError(f"Statement for {self.project_id} is locked")
        payload = self.repository.save_local_snapshot(self.statement)
        self.statement.last_saved = payload["lastSaved"]
        return payload

    def load_statement_data(self, data: dict) -> None:
        """Replace items, details and margin wholesale from a snapshot payload."""
        self._apply(Statement.from_dict(data, project_id=self.project_id))

    def _apply(self, statement: Statement) -> None:
        self.statement.project_details = statement.project_details
        self.statement.profit_margin = statement.profit_margin
        self._set_items(statement.items)

    def save(self) -> StatementVersion:
        """
        Explicit save: local snapshot, then the remote version.

        While editing a loaded version the version is updated in place;
        otherwise a new version is appended. Editing state is reset after.
        """
        if self.locked:
            raise StatementLockedError(
                f"Statement for {self.project_id} is locked; only projects in "
                f"{EDITABLE_STATUS} can be saved")

        previous_saved = self.statement.last_saved
        self.save_statement()
        version_id = self.editing_version_id if not self.is_new_version else None
        try:
            version = self.repository.save_remote_version(self.statement, self.project_name, version_id=version_id)
        except StatementPersistenceError:
            self.statement.last_saved = previous_saved
            raise

        self.editing_version_id = None
        self.is_new_version = True
        return version

    def load_version(self, version_id: str) -> None:
        """Replace state with a saved version and edit that version in place."""
        statement = self.repository.load_remote_version(version_id, project_id=self.project_id)
        self._apply(statement)
        self.editing_version_id = version_id
        self.is_new_version = False
        logger.info(f"Loaded version {version_id} into statement {self.project_id}")

    def start_new_version(self) -> None:
        self.editing_version_id = None
        self.is_new_version = True

    def list_versions(self) -> list[StatementVersion]:
        return self.repository.list_versions(self.project_id)
