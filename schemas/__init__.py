from schemas.application import (
    KYC_FIELDS,
    LOAN_TYPES,
    TERMINAL_STATUSES,
    AdminApplicationView,
    ApplicationCreate,
    ApplicationReceipt,
    ApplicationStats,
    ApplicationStatusView,
    ApprovalRequest,
    LoanTypeInfo,
    StatusQuery,
    draft_problems,
    is_valid_loan_type,
)

__all__ = [
    "KYC_FIELDS",
    "LOAN_TYPES",
    "TERMINAL_STATUSES",
    "AdminApplicationView",
    "ApplicationCreate",
    "ApplicationReceipt",
    "ApplicationStats",
    "ApplicationStatusView",
    "ApprovalRequest",
    "LoanTypeInfo",
    "StatusQuery",
    "draft_problems",
    "is_valid_loan_type",
]
