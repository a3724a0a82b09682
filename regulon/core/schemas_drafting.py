"""Pydantic schemas for the AI drafting endpoint."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DRAFT_STATUS = "AI-Generated Draft – Requires CA/Lawyer Verification"
BASIC_VERSION = "2.0"
ADVANCED_VERSION = "3.0"


class DraftMode(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "DraftMode":
        """Unknown modes fall back to balanced."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.BALANCED


class DocumentType(str, Enum):
    GST_SHOW_CAUSE = "gst-show-cause"
    INCOME_TAX_RESPONSE = "income-tax-response"
    MCA_NOTICE = "mca-notice"
    RBI_FILING = "rbi-filing"
    SEBI_COMPLIANCE = "sebi-compliance"
    CUSTOMS_RESPONSE = "customs-response"
    CONTRACT_REVIEW = "contract-review"
    CUSTOM_DRAFT = "custom-draft"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "DocumentType":
        """Unknown document types fall back to the generic custom draft."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.CUSTOM_DRAFT


class DraftRequest(BaseModel):
    """Body of ``POST /v1/ai-draft``. Never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    document_type: str = Field(..., alias="documentType", min_length=1)
    company_name: str = Field(..., alias="companyName", min_length=1)
    draft_mode: str = Field(default=DraftMode.BALANCED.value, alias="draftMode")
    industry: Optional[str] = None
    context: Optional[str] = None
    notice_details: Optional[str] = Field(default=None, alias="noticeDetails")
    advanced_mode: bool = Field(default=False, alias="advancedMode")
    strict_validation: bool = Field(default=False, alias="strictValidation")
    stream: bool = False

    @property
    def mode(self) -> DraftMode:
        return DraftMode.resolve(self.draft_mode)

    @property
    def doc_type(self) -> DocumentType:
        return DocumentType.resolve(self.document_type)

    @property
    def notice_text(self) -> str:
        return (self.notice_details or "").strip()


class PrecheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_type: str = Field(..., alias="documentType")
    notice_details: str = Field(default="", alias="noticeDetails")


class ReadinessCheck(BaseModel):
    label: str
    passed: bool


class PrecheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_type: DocumentType = Field(..., alias="documentType")
    notice_length: int = Field(..., alias="noticeLength")
    meets_strict_minimum: bool = Field(..., alias="meetsStrictMinimum")
    checks: list[ReadinessCheck]
    missing: list[str]


# ============================================================================
# Notice intelligence
# ============================================================================

Amount = Union[float, int, str, None]


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (int, float)):
        return [str(value)]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    raise ValueError(f"expected a list of strings, got {type(value).__name__}")


class NoticeSnapshot(BaseModel):
    authority: Optional[str] = None
    notice_number: Optional[str] = None
    din_rfn: Optional[str] = None
    period: Optional[str] = None
    response_deadline: Optional[str] = None
    invoked_provisions: list[str] = Field(default_factory=list)
    demand_total: Amount = None

    @field_validator("invoked_provisions", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        return _as_str_list(value)


class Allegation(BaseModel):
    scn_para: Optional[str] = None
    allegation: Optional[str] = None
    amount: Amount = None
    department_basis: Optional[str] = None
    rebuttal_direction: Optional[str] = None
    evidence_expected: list[str] = Field(default_factory=list)
    legal_hooks: list[str] = Field(default_factory=list)

    @field_validator("scn_para", mode="before")
    @classmethod
    def _para_to_str(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("evidence_expected", "legal_hooks", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        return _as_str_list(value)


class NoticeIntelligence(BaseModel):
    """Structured extraction of a regulatory notice."""

    notice_snapshot: NoticeSnapshot = Field(default_factory=NoticeSnapshot)
    allegations: list[Allegation] = Field(default_factory=list)
    critical_missing_fields: list[str] = Field(default_factory=list)

    @field_validator("critical_missing_fields", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        return _as_str_list(value)


# ============================================================================
# Response
# ============================================================================


class DraftMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_type: str = Field(..., alias="documentType")
    company_name: str = Field(..., alias="companyName")
    draft_mode: DraftMode = Field(..., alias="draftMode")
    industry: Optional[str] = None
    advanced_mode: bool = Field(..., alias="advancedMode")
    generated_at: datetime = Field(..., alias="generatedAt")
    status: str = DRAFT_STATUS
    version: str = BASIC_VERSION
    reviewed: bool = False


class DraftResponse(BaseModel):
    draft: str
    metadata: DraftMetadata
    intelligence: Optional[NoticeIntelligence] = None
