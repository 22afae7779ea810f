from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

LoanType = Literal["personal", "clt", "fgts"]
ApplicationStatus = Literal["pending", "approved", "rejected"]

TERMINAL_STATUSES = frozenset({"approved", "rejected"})

KYC_FIELDS = (
    "address",
    "age",
    "birth_date",
    "mother_name",
    "gender",
    "cpf_status",
    "cns_number",
)


class LoanTypeInfo(BaseModel):
    type: LoanType
    title: str
    description: str
    features: list[str]


LOAN_TYPES: dict[str, LoanTypeInfo] = {
    "personal": LoanTypeInfo(
        type="personal",
        title="Empréstimo Pessoal",
        description="Crédito para suas necessidades pessoais",
        features=[
            "Valores até R$ 100.000",
            "Aprovação em até 24h",
            "Documentação simplificada",
            "Taxas competitivas",
        ],
    ),
    "clt": LoanTypeInfo(
        type="clt",
        title="Empréstimo CLT",
        description="Especial para trabalhadores CLT",
        features=[
            "Desconto em folha",
            "Taxas reduzidas",
            "Aprovação facilitada",
            "Sem consulta ao SPC/Serasa",
        ],
    ),
    "fgts": LoanTypeInfo(
        type="fgts",
        title="Empréstimo FGTS",
        description="Use seu FGTS como garantia",
        features=[
            "Menores taxas do mercado",
            "FGTS como garantia",
            "Aprovação automática",
            "Valores até R$ 200.000",
        ],
    ),
}


def is_valid_loan_type(value: Optional[str]) -> bool:
    return value in LOAN_TYPES


def draft_problems(full_name: str, cpf: str, email: str) -> list[str]:
    """
    Minimal well-formedness check shared by the wizard and the intake endpoint.
    Not authoritative validation: it only catches blanks and an email without "@".
    """
    problems = []
    if not (full_name or "").strip():
        problems.append("full_name is required")
    if not (cpf or "").strip():
        problems.append("cpf is required")
    if not (email or "").strip() or "@" not in email:
        problems.append("a valid email is required")
    return problems


class ApplicationCreate(BaseModel):
    full_name: str = Field(..., alias="fullName")
    cpf: str
    email: str
    loan_type: LoanType = Field(..., alias="loanType")

    model_config = {"populate_by_name": True}

    @field_validator("full_name", "cpf", "email")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def _has_at(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("must contain '@'")
        return v


class ApplicationReceipt(BaseModel):
    """Creation response; the only payload that ever carries client_token."""

    id: str
    client_token: str
    status: ApplicationStatus
    approved_amount: Optional[float] = None

    model_config = {"from_attributes": True}


class StatusQuery(BaseModel):
    application_id: Optional[str] = None
    client_token: Optional[str] = None


class ApplicationStatusView(BaseModel):
    """Projection returned by the status gateway."""

    id: str
    status: ApplicationStatus
    approved_amount: Optional[float] = None
    address: Optional[str] = None
    age: Optional[int] = None
    birth_date: Optional[date] = None
    mother_name: Optional[str] = None
    gender: Optional[str] = None
    cpf_status: Optional[str] = None
    cns_number: Optional[str] = None

    model_config = {"from_attributes": True}

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class ApprovalRequest(BaseModel):
    # NaN and inf would store as NULL or break JSON rendering of the status view
    approved_amount: float = Field(..., gt=0, allow_inf_nan=False)
    address: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    birth_date: Optional[date] = None
    mother_name: Optional[str] = None
    gender: Optional[str] = None
    cpf_status: Optional[str] = None
    cns_number: Optional[str] = None

    def kyc_fields(self) -> dict:
        return {name: getattr(self, name) for name in KYC_FIELDS}


class AdminApplicationView(BaseModel):
    """Admin listing row. Deliberately has no client_token field."""

    id: str
    full_name: str
    cpf: str
    email: str
    loan_type: LoanType
    status: ApplicationStatus
    approved_amount: Optional[float] = None
    address: Optional[str] = None
    age: Optional[int] = None
    birth_date: Optional[date] = None
    mother_name: Optional[str] = None
    gender: Optional[str] = None
    cpf_status: Optional[str] = None
    cns_number: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ApplicationStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
