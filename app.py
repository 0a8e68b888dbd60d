"""
Statement of Fees Estimator - FastAPI Web Application

Run with: python app.py
Or:       uvicorn app:app --reload
Opens at: http://127.0.0.1:8000
"""

import sys
import logging
from pathlib import Path
from urllib.parse import urlencode

# Ensure project directory is on sys.path for local module imports
_BASE_DIR = Path(__file__).resolve().parent
if str(_BASE_DIR) not in sys.path:
    sys.path.insert(0, str(_BASE_DIR))

from fastapi import FastAPI, Request, Form, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from dotenv import load_dotenv

from fee_statement.database import (
    DEFAULT_PROJECT_TYPE,
    PROJECT_TYPE_LABELS,
    PROJECT_TYPES,
    STATEMENT_NOTES,
)
from fee_statement.statement_session import EDITABLE_STATUS, StatementSession, is_locked
from fee_statement.statement_store import (
    StatementLockedError,
    StatementPersistenceError,
    StatementRepository,
)

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger("fee_statement.app")

app = FastAPI(title="Statement of Fees Estimator")

BASE_DIR = Path(__file__).resolve().parent
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# Handle Chrome DevTools 404s
@app.get("/.well-known/appspecific/com.chrome.devtools.json")
def chrome_devtools_404():
    raise HTTPException(status_code=404)


repository = StatementRepository.from_env()

# Open statements, keyed by project id (process-local)
_sessions: dict[str, StatementSession] = {}


# -- Jinja2 custom filters --

def currency_filter(value):
    try:
        return f"${value:,.2f}"
    except (ValueError, TypeError):
        return str(value)


def number_filter(value):
    try:
        return f"{value:,.0f}"
    except (ValueError, TypeError):
        return str(value)


def percent_filter(value):
    try:
        return f"{value:g}%"
    except (ValueError, TypeError):
        return str(value)


def quantity_filter(value):
    try:
        return f"{value:,.2f}".rstrip("0").rstrip(".")
    except (ValueError, TypeError):
        return str(value)


templates.env.filters["currency"] = currency_filter
templates.env.filters["number"] = number_filter
templates.env.filters["quantity"] = quantity_filter
templates.env.filters["percent"] = percent_filter


# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------

def get_session(project_id: str, project_type: str | None = None, project_name: str = "",
                status: str | None = None, read_only: bool | None = None) -> StatementSession:
    """Return the open statement for a project, creating it on first access."""
    session = _sessions.get(project_id)
    if session is None:
        session = StatementSession(
            project_id,
            repository,
            project_type=project_type or DEFAULT_PROJECT_TYPE,
            project_name=project_name,
            locked=is_locked(project_id, status or EDITABLE_STATUS, bool(read_only)),
        )
        _sessions[project_id] = session
        logger.info(f"Opened statement for {project_id} (locked={session.locked})")
        return session

    if project_name:
        session.project_name = project_name
    if status is not None or read_only is not None:
        session.locked = is_locked(project_id, status or EDITABLE_STATUS, bool(read_only))
    return session


def _editor_url(project_id: str, message: str = "", level: str = "info") -> str:
    url = f"/statements/{project_id}"
    if message:
        url += "?" + urlencode({"message": message, "level": level})
    return url


def _back_to_editor(session: StatementSession, message: str = "", level: str = "info") -> RedirectResponse:
    if not message and session.locked:
        message, level = "This statement is locked and cannot be edited.", "warning"
    return RedirectResponse(_editor_url(session.project_id, message, level), status_code=303)


# ---------------------------------------------------------------------------
# Landing page
# ---------------------------------------------------------------------------

@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    return templates.TemplateResponse(request, "index.html", {
        "project_types": PROJECT_TYPES,
        "project_type_labels": PROJECT_TYPE_LABELS,
        "open_statements": list(_sessions.values()),
    })


@app.post("/statements")
def open_statement(
    project_id: str = Form(...),
    project_name: str = Form(""),
    project_type: str = Form(DEFAULT_PROJECT_TYPE),
    status: str = Form(EDITABLE_STATUS),
    read_only: str = Form(""),
):
    project_id = project_id.strip()
    if not project_id:
        raise HTTPException(status_code=400, detail="Project id is required")
    get_session(project_id, project_type, project_name.strip(), status, read_only == "on")
    return RedirectResponse(_editor_url(project_id), status_code=303)


# ---------------------------------------------------------------------------
# Statement editor
# ---------------------------------------------------------------------------

@app.get("/statements/{project_id}", response_class=HTMLResponse)
def statement_editor(
    request: Request,
    project_id: str,
    message: str = "",
    level: str = "info",
):
    session = get_session(project_id)

    versions = []
    try:
        versions = session.list_versions()
    except StatementPersistenceError as e:
        message, level = f"Could not load versions: {e}", "error"

    return templates.TemplateResponse(request, "statement.html", {
        "session": session,
        "details": session.project_details,
        "grouped_items": session.grouped_items(),
        "category_totals": session.category_totals(),
        "totals": session.totals,
        "versions": versions,
        "project_types": PROJECT_TYPES,
        "project_type_labels": PROJECT_TYPE_LABELS,
        "notes": STATEMENT_NOTES,
        "message": message,
        "level": level,
    })


@app.post("/statements/{project_id}/items")
def add_item(project_id: str, category: str = Form(...)):
    session = get_session(project_id)
    session.add_new_item(category)
    return _back_to_editor(session)


@app.post("/statements/{project_id}/items/{item_id}")
async def update_item(request: Request, project_id: str, item_id: str):
    session = get_session(project_id)
    form = await request.form()

    for field in ("description", "unit", "quantity", "unit_price"):
        if field in form:
            session.update_item(item_id, field, form.get(field))
    return _back_to_editor(session)


@app.post("/statements/{project_id}/items/{item_id}/delete")
def delete_item(project_id: str, item_id: str):
    session = get_session(project_id)
    session.delete_item(item_id)
    return _back_to_editor(session)


@app.post("/statements/{project_id}/auto-calculate")
def auto_calculate(project_id: str):
    session = get_session(project_id)
    session.auto_calculate_quantities()
    return _back_to_editor(session)


@app.post("/statements/{project_id}/project-type")
def change_project_type(project_id: str, project_type: str = Form(...)):
    session = get_session(project_id)
    session.change_project_type(project_type)
    return _back_to_editor(session)


@app.post("/statements/{project_id}/details")
async def update_details(request: Request, project_id: str):
    session = get_session(project_id)
    form = await request.form()

    # Only fields present in the submitted form are updated
    updates = {key: value for key, value in form.items() if key != "sqft"}
    try:
        session.update_project_details(updates)
    except ValueError as e:
        return _back_to_editor(session, str(e), "error")
    return _back_to_editor(session)


@app.post("/statements/{project_id}/margin")
def set_margin(project_id: str, profit_margin: str = Form("")):
    session = get_session(project_id)
    session.set_profit_margin(profit_margin)
    return _back_to_editor(session)


# ---------------------------------------------------------------------------
# Saving and versions
# ---------------------------------------------------------------------------

@app.post("/statements/{project_id}/save")
def save_statement(project_id: str):
    session = get_session(project_id)
    try:
        version = session.save()
    except StatementLockedError as e:
        return _back_to_editor(session, f"Cannot Save: {e}", "warning")
    except StatementPersistenceError as e:
        logger.error(f"Save failed for {project_id}: {e}")
        return _back_to_editor(session, f"Save failed: {e}", "error")
    return _back_to_editor(session, f"Saved {version.statement_name}")


@app.post("/statements/{project_id}/versions/{version_id}/load")
def load_version(project_id: str, version_id: str):
    session = get_session(project_id)
    try:
        session.load_version(version_id)
    except StatementPersistenceError as e:
        return _back_to_editor(session, f"Load failed: {e}", "error")
    return _back_to_editor(session, "Version loaded. Saving will update this version.")


@app.post("/statements/{project_id}/versions/new")
def start_new_version(project_id: str):
    session = get_session(project_id)
    session.start_new_version()
    return _back_to_editor(session, "Next save will create a new version.")


# ---------------------------------------------------------------------------
# Printable views and data
# ---------------------------------------------------------------------------

@app.get("/statements/{project_id}/print", response_class=HTMLResponse)
def print_statement(request: Request, project_id: str):
    session = get_session(project_id)
    return templates.TemplateResponse(request, "statement_print.html", {
        "project_name": session.project_name,
        "summary": session.statement_summary(),
    })


@app.get("/statements/{project_id}/customer", response_class=HTMLResponse)
def customer_statement(request: Request, project_id: str):
    session = get_session(project_id)
    return templates.TemplateResponse(request, "customer_statement.html", {
        "project_name": session.project_name,
        "summary": session.customer_statement(),
    })


@app.get("/statements/{project_id}/data")
def statement_data(project_id: str):
    session = get_session(project_id)
    return JSONResponse(session.to_dict())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="127.0.0.1", port=8000, reload=True)
