"""Fields a free-text extraction may suggest, and their coercion."""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from coop_lending.engine.amounts import to_amount, to_int
from coop_lending.models.lending import Gender, InterestType, LoanType, MaritalStatus, PensionType, RepaymentType
from coop_lending.store.serialization import parse_date

logger = logging.getLogger(__name__)

PERSONAL = "personal"
PENSION = "pension"
NOMINATIVE = "nominative"

# external name -> (section, attribute, kind); kind is a python type or an Enum class
EXTRACTABLE_FIELDS: dict[str, tuple[str, str, Any]] = {
    "fullName": (PERSONAL, "full_name", str),
    "nik": (PERSONAL, "nik", str),
    "birthDate": (PERSONAL, "birth_date", date),
    "gender": (PERSONAL, "gender", Gender),
    "maritalStatus": (PERSONAL, "marital_status", MaritalStatus),
    "address": (PERSONAL, "address", str),
    "phoneNumber": (PERSONAL, "phone_number", str),
    "pensionNumber": (PENSION, "pension_number", str),
    "formerInstitution": (PENSION, "former_institution", str),
    "mutationOffice": (PENSION, "mutation_office", str),
    "pensionType": (PENSION, "pension_type", PensionType),
    "skNumber": (PENSION, "sk_number", str),
    "skIssuanceDate": (PENSION, "sk_issuance_date", date),
    "salaryAmount": (PENSION, "salary_amount", Decimal),
    "loanType": (NOMINATIVE, "loan_type", LoanType),
    "loanDate": (NOMINATIVE, "loan_date", date),
    "loanAmount": (NOMINATIVE, "loan_amount", Decimal),
    "interestType": (NOMINATIVE, "interest_type", InterestType),
    "interestRate": (NOMINATIVE, "interest_rate", Decimal),
    "tenureMonths": (NOMINATIVE, "tenure_months", int),
    "adminFee": (NOMINATIVE, "admin_fee", Decimal),
    "provisionFee": (NOMINATIVE, "provision_fee", Decimal),
    "marketingFee": (NOMINATIVE, "marketing_fee", Decimal),
    "riskReserve": (NOMINATIVE, "risk_reserve", Decimal),
    "flaggingFee": (NOMINATIVE, "flagging_fee", Decimal),
    "principalSavings": (NOMINATIVE, "principal_savings", Decimal),
    "mandatorySavings": (NOMINATIVE, "mandatory_savings", Decimal),
    "repaymentType": (NOMINATIVE, "repayment_type", RepaymentType),
    "repaymentAmount": (NOMINATIVE, "repayment_amount", Decimal),
}


def match_enum(enum_cls: type[Enum], value: Any) -> Enum | None:
    """Find a member by value, name or display label, ignoring case."""
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        candidates = (member.value, member.name, getattr(member, "label", ""))
        if text in (str(c).lower() for c in candidates):
            return member
    return None


def sanitize_extraction(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Keep known, non-empty fields and coerce them to model types.

    Unknown keys, blank values, unparseable dates and unrecognized enum
    values are dropped so they never overwrite what the user typed.
    """
    cleaned: dict[str, Any] = {}
    for name, value in raw.items():
        if name not in EXTRACTABLE_FIELDS:
            logger.debug("Dropping unknown extracted field %r", name)
            continue
        if value is None or value == "":
            continue

        kind = EXTRACTABLE_FIELDS[name][2]
        if kind is str:
            cleaned[name] = str(value).strip()
        elif kind is Decimal:
            cleaned[name] = to_amount(value)
        elif kind is int:
            cleaned[name] = to_int(value)
        elif kind is date:
            parsed = parse_date(value)
            if parsed is None:
                logger.debug("Dropping unparseable date %s=%r", name, value)
                continue
            cleaned[name] = parsed
        else:
            member = match_enum(kind, value)
            if member is None:
                logger.debug("Dropping unknown %s value %r", kind.__name__, value)
                continue
            cleaned[name] = member
    return cleaned


def split_by_section(fields: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Group sanitized fields into per-section attribute updates."""
    sections: dict[str, dict[str, Any]] = {PERSONAL: {}, PENSION: {}, NOMINATIVE: {}}
    for name, value in fields.items():
        section, attribute, _ = EXTRACTABLE_FIELDS[name]
        sections[section][attribute] = value
    return sections
