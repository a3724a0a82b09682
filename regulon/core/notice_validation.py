"""Gates applied to a draft request before any model call."""

import re
from dataclasses import dataclass

from regulon.core.errors import ExtractionRejected, ValidationRejected
from regulon.core.schemas_drafting import (
    DocumentType,
    DraftRequest,
    NoticeIntelligence,
    ReadinessCheck,
)

_AMOUNT = re.compile(r"(?:Rs\.?|INR|₹)\s?[\d,]+", re.IGNORECASE)
_DATE = re.compile(
    r"\b\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}\b|\b\d{1,2}\s+[A-Za-z]{3,9}\s+\d{4}\b"
)


@dataclass(frozen=True)
class _Check:
    label: str
    pattern: re.Pattern


def _ci(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


READINESS_CHECKS: dict[DocumentType, list[_Check]] = {
    DocumentType.GST_SHOW_CAUSE: [
        _Check("DIN/RFN reference", _ci(r"(DIN|RFN|Reference\s*No|Ref\.?\s*No)")),
        _Check("Section/Rule references", _ci(r"(Section|Sec\.|Rule)\s*\d+")),
        _Check("Demand/amount details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check("GST return/context indicators", _ci(r"(GSTR-3B|GSTR-2B|DRC-01|ITC)")),
    ],
    DocumentType.MCA_NOTICE: [
        _Check("Notice reference/DIN", _ci(r"(DIN|SRN|Reference\s*No|Ref\.?\s*No|ROC)")),
        _Check("Section/Rule references", _ci(r"(Section|Sec\.|Rule)\s*\d+")),
        _Check("Penalty/amount details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check("MCA/ROC context", _ci(r"(Companies Act|ROC|MCA|adjudication|compounding)")),
    ],
    DocumentType.INCOME_TAX_RESPONSE: [
        _Check("Notice reference/DIN", _ci(r"(DIN|Notice\s*No|Ref\.?\s*No|AY)")),
        _Check("Section references", _ci(r"(Section|Sec\.)\s*\d+")),
        _Check("Tax/amount details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check("Income-tax context", _ci(r"(Income-tax|assessment|reassessment|CPC|AO)")),
    ],
    DocumentType.RBI_FILING: [
        _Check("Reference number", _ci(r"(Ref\.?\s*No|Reference\s*No|letter|communication)")),
        _Check("Regulation references", _ci(r"(Regulation|Section|Rule)\s*\d+")),
        _Check("Exposure/amount details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check("RBI/FEMA context", _ci(r"(RBI|FEMA|authorized dealer|compounding)")),
    ],
    DocumentType.SEBI_COMPLIANCE: [
        _Check("Reference number", _ci(r"(Ref\.?\s*No|Reference\s*No|SEBI)")),
        _Check("Regulation references", _ci(r"(Regulation|Section|Rule)\s*\d+")),
        _Check("Exposure/amount details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check("SEBI/disclosure context", _ci(r"(SEBI|listing|disclosure|governance|investor)")),
    ],
    DocumentType.CUSTOMS_RESPONSE: [
        _Check("DIN/RFN reference", _ci(r"(DIN|RFN|SCN|Ref\.?\s*No)")),
        _Check("Section references", _ci(r"(Section|Sec\.)\s*\d+")),
        _Check("Duty/amount details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check(
            "Customs context",
            _ci(r"(Bill of Entry|BOE|classification|valuation|Section 28|Section 111)"),
        ),
    ],
    DocumentType.CONTRACT_REVIEW: [
        _Check(
            "Agreement/contract reference",
            _ci(r"(agreement|contract|clause|party|effective date)"),
        ),
        _Check("Clause/legal references", _ci(r"(clause|section)\s*\d+(\.\d+)*")),
        _Check(
            "Commercial exposure details",
            _ci(r"(?:Rs\.?|INR|₹)\s?[\d,]+|liability|damages"),
        ),
        _Check("Date timeline evidence", _DATE),
        _Check("Dispute/risk context", _ci(r"(indemnity|termination|dispute|arbitration|liability)")),
    ],
    DocumentType.CUSTOM_DRAFT: [
        _Check("Reference identifier", _ci(r"(DIN|RFN|Ref\.?\s*No|Reference\s*No|notice)")),
        _Check("Provision references", _ci(r"(Section|Sec\.|Rule|Regulation)\s*\d+")),
        _Check("Amount/exposure details", _AMOUNT),
        _Check("Date timeline evidence", _DATE),
        _Check("Authority/law context", _ci(r"(authority|department|act|regulation|notice|order)")),
    ],
}


def run_readiness_checks(document_type: DocumentType, notice_details: str) -> list[ReadinessCheck]:
    """Heuristic presence checks for the facts a rebuttal usually needs."""
    checks = READINESS_CHECKS[document_type]
    return [
        ReadinessCheck(label=check.label, passed=bool(check.pattern.search(notice_details)))
        for check in checks
    ]


def validate_draft_request(request: DraftRequest, min_chars: int) -> None:
    """Reject strict requests whose notice text is missing or too short."""
    if not request.strict_validation:
        return
    length = len(request.notice_text)
    if length < min_chars:
        raise ValidationRejected(
            f"Strict validation requires detailed notice/order text "
            f"(minimum {min_chars} characters, received {length})."
        )


def enforce_critical_fields(intelligence: NoticeIntelligence, strict: bool) -> None:
    """Refuse strict drafting while the extraction reports missing fields."""
    if strict and intelligence.critical_missing_fields:
        missing = intelligence.critical_missing_fields
        raise ExtractionRejected(
            f"Notice is missing critical fields: {', '.join(missing)}. "
            "Add them to the notice text and resubmit.",
            missing_fields=missing,
        )
