"""
Central database for statement-of-fees catalogs.
Unit prices reflect current Delaware / Sussex County market conditions.
Referenced by statement_estimator.py and statement_session.py.
"""

# ---------------------------------------------------------------------------
# Project types
# ---------------------------------------------------------------------------
BARNDOMINIUM = "barndominium"
RESIDENTIAL_GARAGE = "residential_garage"
COMMERCIAL = "commercial"

PROJECT_TYPES = (BARNDOMINIUM, RESIDENTIAL_GARAGE, COMMERCIAL)
DEFAULT_PROJECT_TYPE = BARNDOMINIUM

# Tracks finished and unfinished space separately; every other type
# uses a single width x length footprint.
SPLIT_PROJECT_TYPE = BARNDOMINIUM

PROJECT_TYPE_LABELS = {
    BARNDOMINIUM: "Barndominium",
    RESIDENTIAL_GARAGE: "Residential Garage",
    COMMERCIAL: "Commercial Building",
}

# ---------------------------------------------------------------------------
# Fee catalogs per project type
# Format: (category, description, unit, unit_price)
# Order is display order; categories group in first-seen order.
# ---------------------------------------------------------------------------
BARNDOMINIUM_FEES = (
    # Site Work & Foundation
    ("Site Work & Foundation", "Site Preparation & Clearing", "acre", 3500.00),
    ("Site Work & Foundation", "Excavation & Grading", "sq ft", 2.50),
    ("Site Work & Foundation", "Concrete Slab", "sq ft", 8.50),
    ("Site Work & Foundation", "Vapor Barrier & Insulation", "sq ft", 1.75),

    # Structure & Framing
    ("Structure & Framing", "Lumber Frame Structure", "sq ft", 12.00),
    ("Structure & Framing", "Metal Roof System", "sq ft", 6.50),
    ("Structure & Framing", "Metal Siding", "sq ft", 5.25),
    ("Structure & Framing", "Overhead Doors", "each", 1800.00),
    ("Structure & Framing", "Walk-in Doors", "each", 450.00),

    # Finished Space (higher cost)
    ("Finished Space", "Electrical Rough-in (Finished)", "finished sq ft", 6.50),
    ("Finished Space", "Plumbing Rough-in (Finished)", "finished sq ft", 8.00),
    ("Finished Space", "Wall Insulation (R-19)", "finished sq ft", 2.25),
    ("Finished Space", "Drywall & Finishing", "finished sq ft", 4.75),
    ("Finished Space", "Interior Paint", "finished sq ft", 2.50),
    ("Finished Space", "Flooring (LVP)", "finished sq ft", 5.50),
    ("Finished Space", "Kitchen Cabinets", "linear ft", 125.00),
    ("Finished Space", "Bathroom Vanities", "each", 850.00),

    # Unfinished Space (lower cost)
    ("Unfinished Space", "Basic Electrical (Unfinished)", "unfinished sq ft", 2.50),
    ("Unfinished Space", "Concrete Sealing", "unfinished sq ft", 1.25),
    ("Unfinished Space", "Liner Panel Ceiling", "unfinished sq ft", 3.75),
    ("Unfinished Space", "Liner Panel Walls", "unfinished sq ft", 4.25),
    ("Unfinished Space", "Drywall Walls", "unfinished sq ft", 3.50),
    ("Unfinished Space", "Drywall Ceilings", "unfinished sq ft", 3.25),

    # Stairs (2-floor only)
    ("Structure & Framing", "Interior Stairs", "each", 4500.00),

    # Permits & Management
    ("Permits & Inspections", "Delaware Building Permit", "each", 850.00),
    ("Permits & Inspections", "Impact Fees", "each", 1200.00),
    ("Permits & Inspections", "Inspections Package", "each", 650.00),
    ("Permits & Inspections", "Project Manager Fee", "each", 5000.00),
    ("Permits & Inspections", "Septic System Connection", "each", 8500.00),
)

RESIDENTIAL_GARAGE_FEES = (
    # Site Work & Foundation
    ("Site Work & Foundation", "Site Preparation", "sq ft", 1.50),
    ("Site Work & Foundation", "Concrete Slab", "sq ft", 7.50),
    ("Site Work & Foundation", "Vapor Barrier", "sq ft", 1.25),

    # Structure & Framing
    ("Structure & Framing", "Lumber Frame Structure", "sq ft", 8.50),
    ("Structure & Framing", "Roof System", "sq ft", 5.50),
    ("Structure & Framing", "Siding", "sq ft", 4.25),
    ("Structure & Framing", "Overhead Doors", "each", 1200.00),
    ("Structure & Framing", "Walk-in Doors", "each", 350.00),

    # Electrical & Basic Systems
    ("Electrical & Systems", "Basic Electrical", "sq ft", 2.25),
    ("Electrical & Systems", "Electrical Panel", "each", 1800.00),

    # Permits & Management
    ("Permits & Inspections", "Building Permit", "each", 450.00),
    ("Permits & Inspections", "Inspections", "each", 350.00),
    ("Permits & Inspections", "Project Management", "each", 2500.00),
)

COMMERCIAL_FEES = (
    # Site Work & Foundation
    ("Site Work & Foundation", "Site Preparation & Clearing", "acre", 5000.00),
    ("Site Work & Foundation", "Excavation & Grading", "sq ft", 3.50),
    ("Site Work & Foundation", "Commercial Concrete Slab", "sq ft", 12.50),
    ("Site Work & Foundation", "Vapor Barrier & Insulation", "sq ft", 2.25),

    # Structure & Framing
    ("Structure & Framing", "Steel Frame Structure", "sq ft", 18.00),
    ("Structure & Framing", "Commercial Roof System", "sq ft", 9.50),
    ("Structure & Framing", "Commercial Siding", "sq ft", 7.25),
    ("Structure & Framing", "Commercial Overhead Doors", "each", 3500.00),
    ("Structure & Framing", "Commercial Entry Doors", "each", 750.00),

    # Commercial Systems
    ("Commercial Systems", "Commercial Electrical", "sq ft", 8.50),
    ("Commercial Systems", "Commercial Electrical Panel", "each", 5500.00),
    ("Commercial Systems", "HVAC System", "sq ft", 12.00),
    ("Commercial Systems", "Fire Safety Systems", "sq ft", 3.50),

    # Permits & Management
    ("Permits & Inspections", "Commercial Building Permit", "each", 2500.00),
    ("Permits & Inspections", "Commercial Impact Fees", "each", 5000.00),
    ("Permits & Inspections", "Commercial Inspections", "each", 1500.00),
    ("Permits & Inspections", "Project Manager Fee", "each", 8500.00),
)

FEE_CATALOGS = {
    BARNDOMINIUM: BARNDOMINIUM_FEES,
    RESIDENTIAL_GARAGE: RESIDENTIAL_GARAGE_FEES,
    COMMERCIAL: COMMERCIAL_FEES,
}


def get_default_fees(project_type: str) -> tuple:
    """Return the catalog for a project type. Unknown types get the default catalog."""
    return FEE_CATALOGS.get(project_type, FEE_CATALOGS[DEFAULT_PROJECT_TYPE])


# ---------------------------------------------------------------------------
# Statement defaults
# ---------------------------------------------------------------------------
DEFAULT_PROFIT_MARGIN = 20.0

# Building height defaults (ft)
DEFAULT_HEIGHT_FT = {
    COMMERCIAL: 16.0,
    RESIDENTIAL_GARAGE: 12.0,
    BARNDOMINIUM: 12.0,
}
DEFAULT_FINISHED_HEIGHT_FT = 10.0
DEFAULT_UNFINISHED_HEIGHT_FT = 14.0

# Count fields seeded on a brand-new statement
DEFAULT_COUNTS = {
    "floors": 1,
    "acres": 0.0,
    "doors": 1.0,
    "walk_doors": 2.0,
    "kitchen_cabinets": 20.0,  # linear ft
    "bathrooms": 2.0,
}

# Printed under the totals of every statement
STATEMENT_NOTES = (
    "Prices are estimates based on current Delaware market conditions",
    "Final costs may vary based on material selections and site conditions",
    "Permits and inspections based on Sussex County requirements",
    "Does not include well, septic installation, or utility connections",
    "Valid for 30 days from date of issue",
    "Project Manager Fee includes oversight of all construction phases",
)


"""
CATALOG MAINTENANCE
===================

Update the tables above when:
1. Supplier or subcontractor pricing changes
2. County permit / impact fee schedules are revised
3. A new project type is offered (add it to PROJECT_TYPES, FEE_CATALOGS,
   PROJECT_TYPE_LABELS and DEFAULT_HEIGHT_FT)

Descriptions double as match keys for the quantity auto-calculator in
statement_estimator.py (e.g. "Overhead Doors", "Concrete Slab"). Renaming an
entry can silently move it to a different rule; check QUANTITY_RULES first.
"""
