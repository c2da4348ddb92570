"""Loan application form state with on-change recomputation.

A draft holds the sections of a customer record being entered or edited.
Every change to a loan term re-runs the derivation engine, so the
installment and maturity shown are always consistent with the inputs.
"""

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from coop_lending.config import FeePolicy, RiskPolicy
from coop_lending.engine import (
    DebtToIncome,
    DisbursementBreakdown,
    calculate_disbursement,
    debt_to_income,
    derive_terms,
    equivalent_flat_rate,
    suggest_fees,
    to_amount,
)
from coop_lending.exceptions import DocumentLimitError, SchemaError
from coop_lending.extraction.fields import NOMINATIVE, PENSION, PERSONAL, sanitize_extraction, split_by_section
from coop_lending.models.lending import (
    Customer,
    CustomerDocument,
    CustomerStatus,
    DocumentCategory,
    InterestType,
    NominativeData,
    PensionData,
    PersonalInfo,
)
from coop_lending.models.lending.document import can_accept, category_limit, document_type_for_mime
from coop_lending.models.lending.nominative import DERIVATION_INPUTS, DERIVED_FIELDS
from coop_lending.store.serialization import coerce_field, from_record, to_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftSummary:
    """Figures shown beside the form while editing."""

    breakdown: DisbursementBreakdown
    debt_to_income: DebtToIncome
    flat_rate: Decimal  # equivalent monthly flat rate for annuity loans


def make_document(
    name: str,
    mime_type: str,
    url: str,
    category: DocumentCategory = DocumentCategory.OTHER,
) -> CustomerDocument:
    """Build a document reference for an uploaded file."""
    return CustomerDocument(
        id=uuid.uuid4().hex,
        name=name,
        type=document_type_for_mime(mime_type),
        category=category,
        url=url,
    )


@dataclass
class LoanApplicationDraft:
    """Editable state of one customer record.

    ``record_id`` is None for a record that has never been saved.
    """

    personal: PersonalInfo = field(default_factory=PersonalInfo)
    pension: PensionData = field(default_factory=PensionData)
    nominative: NominativeData = field(default_factory=NominativeData)
    documents: list[CustomerDocument] = field(default_factory=list)
    marketing_name: str = ""
    record_id: str | None = None
    fee_policy: FeePolicy = field(default_factory=FeePolicy, repr=False)
    risk_policy: RiskPolicy = field(default_factory=RiskPolicy, repr=False)

    def __post_init__(self) -> None:
        # Fee defaults are only suggested when the principal moves away from this
        self._observed_principal = to_amount(self.nominative.loan_amount)

    @classmethod
    def from_customer(
        cls,
        customer: Customer,
        fee_policy: FeePolicy | None = None,
        risk_policy: RiskPolicy | None = None,
    ) -> "LoanApplicationDraft":
        """Open an existing record for editing without touching its fees."""
        return cls(
            personal=replace(customer.personal),
            pension=replace(customer.pension),
            nominative=replace(customer.nominative),
            documents=list(customer.documents),
            marketing_name=customer.marketing_name or "",
            record_id=customer.id,
            fee_policy=fee_policy or FeePolicy(),
            risk_policy=risk_policy or RiskPolicy(),
        )

    def update_personal(self, **changes: Any) -> None:
        self.personal = replace(self.personal, **self._coerce(PersonalInfo, changes))

    def update_pension(self, **changes: Any) -> None:
        self.pension = replace(self.pension, **self._coerce(PensionData, changes))

    def update_nominative(self, **changes: Any) -> None:
        """Apply loan-term edits and recompute the derived fields.

        A new principal refreshes the fee and savings defaults, except for
        fees given explicitly in the same call. Editing a fee alone never
        resets the others.

        Raises
        ------
        ValueError
            If a field is unknown or invalid, or if installment or maturity
            is set directly; both always follow from the other terms.
        """
        derived = [name for name in DERIVED_FIELDS if name in changes]
        if derived:
            raise ValueError(f"{', '.join(derived)} cannot be edited; it is derived from the loan terms")
        values = self._coerce(NominativeData, changes)

        if "loan_amount" in values and values["loan_amount"] != self._observed_principal:
            suggested = suggest_fees(values["loan_amount"], self.fee_policy)
            for name, amount in suggested.items():
                values.setdefault(name, amount)
            self._observed_principal = values["loan_amount"]

        nominative = replace(self.nominative, **values)
        if any(name in values for name in DERIVATION_INPUTS):
            nominative = derive_terms(nominative)
        self.nominative = nominative

    def merge_extracted(self, raw: Mapping[str, Any]) -> list[str]:
        """Merge extraction suggestions into the form; nothing is saved.

        Returns
        -------
        list[str]
            External names of the fields that were applied.
        """
        fields = sanitize_extraction(raw)
        sections = split_by_section(fields)
        if sections[PERSONAL]:
            self.update_personal(**sections[PERSONAL])
        if sections[PENSION]:
            self.update_pension(**sections[PENSION])
        if sections[NOMINATIVE]:
            self.update_nominative(**sections[NOMINATIVE])
        logger.info("Merged %d extracted fields into draft %s", len(fields), self.record_id or "new")
        return list(fields)

    def add_documents(self, category: DocumentCategory, documents: Sequence[CustomerDocument]) -> None:
        """Attach documents under a category.

        Raises
        ------
        DocumentLimitError
            If the category would exceed its cap; nothing is attached.
        """
        if not can_accept(self.documents, category, len(documents)):
            raise DocumentLimitError(
                f"Category {category.value} accepts at most {category_limit(category)} documents"
            )
        self.documents = self.documents + [replace(doc, category=category) for doc in documents]

    def remove_document(self, document_id: str) -> bool:
        before = len(self.documents)
        self.documents = [doc for doc in self.documents if doc.id != document_id]
        return len(self.documents) != before

    def documents_in(self, category: DocumentCategory) -> list[CustomerDocument]:
        return [doc for doc in self.documents if doc.category == category]

    def summary(self) -> DraftSummary:
        breakdown = calculate_disbursement(self.nominative)
        if self.nominative.interest_type == InterestType.ANNUITY:
            flat_rate = equivalent_flat_rate(
                self.nominative.loan_amount,
                self.nominative.monthly_installment,
                self.nominative.tenure_months,
            )
        else:
            flat_rate = to_amount(self.nominative.interest_rate)
        return DraftSummary(
            breakdown=breakdown,
            debt_to_income=debt_to_income(
                self.nominative.monthly_installment,
                self.pension.salary_amount,
                self.risk_policy,
            ),
            flat_rate=flat_rate,
        )

    def to_customer(self, existing: Customer | None = None, now: datetime | None = None) -> Customer:
        """Build the record to save.

        An existing record keeps its id, creation time, status and
        resolution; a new one starts ACTIVE.
        """
        marketing_name = self.marketing_name.strip() or None
        if existing is not None:
            return replace(
                existing,
                personal=self.personal,
                pension=self.pension,
                nominative=self.nominative,
                documents=list(self.documents),
                marketing_name=marketing_name,
            )
        return Customer(
            id=self.record_id or uuid.uuid4().hex,
            personal=self.personal,
            pension=self.pension,
            nominative=self.nominative,
            created_at=now or datetime.now(),
            documents=list(self.documents),
            marketing_name=marketing_name,
            status=CustomerStatus.ACTIVE,
        )

    def to_dict(self) -> dict[str, Any]:
        """Scratch-slot payload for the draft store."""
        return {
            "id": self.record_id,
            "personal": to_record(self.personal),
            "pension": to_record(self.pension),
            "nominative": to_record(self.nominative),
            "documents": [to_record(doc) for doc in self.documents],
            "marketingName": self.marketing_name,
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        fee_policy: FeePolicy | None = None,
        risk_policy: RiskPolicy | None = None,
    ) -> "LoanApplicationDraft":
        """Restore a draft saved with ``to_dict``.

        Raises
        ------
        SchemaError
            If a section is malformed.
        """
        documents = data.get("documents") or []
        if not isinstance(documents, list):
            raise SchemaError("Draft documents must be an array")
        return cls(
            personal=from_record(PersonalInfo, data.get("personal") or {}),
            pension=from_record(PensionData, data.get("pension") or {}),
            nominative=from_record(NominativeData, data.get("nominative") or {}),
            documents=[from_record(CustomerDocument, doc) for doc in documents],
            marketing_name=str(data.get("marketingName") or ""),
            record_id=data.get("id") or None,
            fee_policy=fee_policy or FeePolicy(),
            risk_policy=risk_policy or RiskPolicy(),
        )

    @staticmethod
    def _coerce(section: type, changes: Mapping[str, Any]) -> dict[str, Any]:
        try:
            return {name: coerce_field(section, name, value) for name, value in changes.items()}
        except SchemaError as exc:
            raise ValueError(str(exc)) from exc
