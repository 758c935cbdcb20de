"""Introduction, hire and invoice schemas."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class IntroductionCreateRequest(BaseModel):
    """Admin introduction of a candidate to a job."""

    job_id: str = Field(min_length=1)
    candidate_id: str = Field(min_length=1)
    note: Optional[str] = Field(None, max_length=2000)


class IntroductionCreatedResponse(BaseModel):
    id: str


class HireConfirmRequest(BaseModel):
    """Employer confirmation that the introduced candidate was hired."""

    start_date: date = Field(description="First day of work (YYYY-MM-DD)")


class HireResultResponse(BaseModel):
    """Outcome of a hire confirmation or invoice repair."""

    hire_id: str
    introduction_id: str
    invoice_id: str
    invoice_status: str
    stripe_invoice_id: Optional[str] = None
    amount_cents: int
    currency: str


class InvoiceResponse(BaseModel):
    id: str
    introduction_id: str
    employer_id: str
    candidate_id: str
    job_id: str
    amount_cents: int
    amount_display: str
    currency: str
    status: str
    stripe_invoice_id: Optional[str] = None
    stripe_payment_status: Optional[str] = None
    created_at: Optional[str] = None
    paid_at: Optional[str] = None
    company_name: Optional[str] = None
    candidate_name: Optional[str] = None
    job_title: Optional[str] = None


class StatsResponse(BaseModel):
    """Admin dashboard totals."""

    total_hires: int
    active_jobs: int
    total_revenue_cents: int
    outstanding_invoices: int
