"""Marketplace-wide constants: service area, role catalogue and pricing."""

ALLOWED_PARISHES: tuple[str, ...] = (
    "East Baton Rouge",
    "West Baton Rouge",
    "Ascension",
    "Livingston",
    "Iberville",
    "Pointe Coupee",
)

ROLE_CATEGORIES: tuple[str, ...] = (
    "Medical Virtual Assistant",
    "Patient Intake Coordinator",
    "Medical Billing",
    "Medical Coding",
    "Prior Authorization Specialist",
    "Insurance Verification",
    "Scheduling Coordinator",
    "Front Desk (remote)",
    "Care Coordinator (administrative)",
)

# One flat fee per confirmed placement, in minor currency units ($4,500.00)
PLACEMENT_FEE_CENTS = 450000
PLACEMENT_CURRENCY = "usd"
INVOICE_DAYS_UNTIL_DUE = 7
