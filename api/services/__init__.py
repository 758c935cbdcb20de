"""
API Services Layer.

Database operations behind the API endpoints. Every function takes the
request's ``AsyncSession`` as its first argument.
"""

from api.services.users import (
    register_user,
    authenticate_user,
    get_user,
    seed_admin,
)

from api.services.candidates import (
    get_my_candidate_profile,
    upsert_candidate_profile,
    list_candidates,
    get_candidate,
)

from api.services.employers import (
    get_my_employer_profile,
    upsert_employer_profile,
    accept_agreement,
    list_employer_introductions,
    list_employer_invoices,
)

from api.services.jobs import (
    create_job,
    list_open_jobs,
    list_employer_jobs,
    get_job_owner_user_id,
    close_job,
)

from api.services.matching import (
    candidate_matches,
    find_matches,
)

from api.services.introductions import (
    create_introduction,
    list_introductions,
)

from api.services.hiring import (
    confirm_hire,
    ensure_invoice_for_hire,
)

from api.services.invoices import (
    list_invoices,
    void_invoice,
    get_stats,
)

from api.services.reconciliation import (
    handle_invoicing_event,
)

__all__ = [
    # Users
    "register_user",
    "authenticate_user",
    "get_user",
    "seed_admin",
    # Candidates
    "get_my_candidate_profile",
    "upsert_candidate_profile",
    "list_candidates",
    "get_candidate",
    # Employers
    "get_my_employer_profile",
    "upsert_employer_profile",
    "accept_agreement",
    "list_employer_introductions",
    "list_employer_invoices",
    # Jobs
    "create_job",
    "list_open_jobs",
    "list_employer_jobs",
    "get_job_owner_user_id",
    "close_job",
    # Matching
    "candidate_matches",
    "find_matches",
    # Introductions
    "create_introduction",
    "list_introductions",
    # Hiring
    "confirm_hire",
    "ensure_invoice_for_hire",
    # Invoices
    "list_invoices",
    "void_invoice",
    "get_stats",
    # Reconciliation
    "handle_invoicing_event",
]
