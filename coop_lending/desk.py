"""Loan desk: the operations behind the application screens.

``LendingDesk`` wires configuration, storage, repositories, the form
editor, lifecycle rules, reporting and extraction together. Failures of
external collaborators and invalid requests from the screens degrade to a
logged no-op; the in-memory state is never lost.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from coop_lending.config import LendingConfig
from coop_lending.editor import LoanApplicationDraft
from coop_lending.exceptions import (
    ConfigurationError,
    DocumentLimitError,
    ExportError,
    ExtractionError,
    InvalidTransitionError,
    SchemaError,
)
from coop_lending.extraction import GeminiExtractor, TextExtractor
from coop_lending.lifecycle import amend_resolution, apply_transition, build_topup_draft, revert_to_active
from coop_lending.logging import get_logger
from coop_lending.models.lending import Customer, CustomerDocument, CustomerStatus, MarketingTarget
from coop_lending.reporting import (
    REPORTS,
    DashboardTotals,
    InstitutionBucket,
    MarketingSummary,
    count_by_institution,
    disbursement_totals,
    export_filename,
    report_rows,
    resolved_customers,
    totals_by_marketing,
    write_workbook,
)
from coop_lending.store import (
    CustomerRepository,
    DraftStore,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    MarketingTargetRepository,
    UiStateStore,
)


@dataclass(frozen=True)
class Dashboard:
    """Everything the dashboard screen shows."""

    totals: DashboardTotals
    by_institution: dict[InstitutionBucket, int]
    by_marketing: list[MarketingSummary]


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of a text extraction; ``notice`` is set when it failed."""

    applied: list[str]
    notice: str | None = None


class LendingDesk:
    """Facade over the customer and marketing-target collections."""

    def __init__(
        self,
        config: LendingConfig | None = None,
        storage: KeyValueStorage | None = None,
        extractor: TextExtractor | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize the desk and load persisted collections.

        Parameters
        ----------
        config : LendingConfig | None
            Configuration; defaults to ``LendingConfig()``.
        storage : KeyValueStorage | None
            Storage backend. When omitted a ``JsonFileStorage`` is used if
            ``config.storage.path`` is set, else process memory.
        extractor : TextExtractor | None
            Free-text extraction collaborator. Defaults to a
            ``GeminiExtractor`` when an API key is configured.
        session_id : str | None
            Writer identity used to tell own writes from external ones.
        """
        self.config = config or LendingConfig()
        storage_config = self.config.storage
        if storage is None:
            storage = JsonFileStorage(storage_config.path) if storage_config.path else InMemoryStorage()
        self.storage = storage
        if extractor is None and self.config.extraction.api_key:
            extractor = GeminiExtractor(self.config.extraction)
        self.extractor = extractor
        self.log = get_logger(__name__, session=session_id)

        self.customers = CustomerRepository(storage, storage_config.customers_key, session_id)
        self.targets = MarketingTargetRepository(storage, storage_config.marketing_targets_key, session_id)
        self.drafts = DraftStore(storage, storage_config)
        self.ui = UiStateStore(storage, storage_config)

        self.customers.load()
        self.targets.load()
        self.log.info("Desk ready with %d customers, %d marketing targets", len(self.customers), len(self.targets))

    # Customers

    def open_draft(self, record_id: str | None = None) -> LoanApplicationDraft | None:
        """Open the form for a new or existing record.

        A saved draft for the record takes precedence over the stored
        record. Returns None for an unknown id.
        """
        existing = None
        if record_id is not None:
            existing = self.customers.get(record_id)
            if existing is None:
                self.log.warning("Cannot edit unknown customer %s", record_id)
                return None

        draft = self._restore_draft(record_id)
        if draft is None:
            draft = (
                LoanApplicationDraft.from_customer(existing, self.config.fees, self.config.risk)
                if existing is not None
                else LoanApplicationDraft(fee_policy=self.config.fees, risk_policy=self.config.risk)
            )
        self.ui.editing_id = record_id
        self.ui.active_tab = "input"
        return draft

    def stage_draft(self, draft: LoanApplicationDraft) -> None:
        """Remember form state; written once the debounce interval passes."""
        self.drafts.stage(draft.record_id, draft.to_dict())

    def save_customer(self, draft: LoanApplicationDraft) -> Customer:
        """Upsert the record built from a draft and close the form."""
        existing = self.customers.get(draft.record_id) if draft.record_id else None
        customer = draft.to_customer(existing)
        self.customers.upsert(customer)
        self.drafts.clear(draft.record_id)
        if existing is None:
            self.drafts.clear(None)
        self.ui.editing_id = None
        self.ui.active_tab = "list"
        self.log.info("Saved customer %s (%s)", customer.id, customer.status.value)
        return customer

    def cancel_draft(self, draft: LoanApplicationDraft) -> None:
        self.drafts.clear(draft.record_id)
        self.ui.editing_id = None
        self.ui.active_tab = "list"

    def delete_customer(self, record_id: str) -> bool:
        """Remove a record, its draft and, if it was being edited, the editing pointer."""
        self.drafts.clear(record_id)
        removed = self.customers.delete(record_id)
        if self.ui.editing_id == record_id:
            self.ui.editing_id = None
            self.ui.active_tab = "list"
        if removed:
            self.log.info("Deleted customer %s", record_id)
        return removed

    def start_topup(self, record_id: str, today: date | None = None) -> LoanApplicationDraft | None:
        """Open a replacement-loan draft for an active customer.

        Saving the draft overwrites the record under the same id. Returns
        None when the customer is unknown or not ACTIVE.
        """
        customer = self.customers.get(record_id)
        if customer is None or not customer.is_active:
            self.log.warning("Top-up unavailable for customer %s", record_id)
            return None
        topup = build_topup_draft(customer, today or date.today())
        draft = LoanApplicationDraft.from_customer(topup, self.config.fees, self.config.risk)
        self.ui.editing_id = record_id
        self.ui.active_tab = "input"
        return draft

    def change_status(
        self,
        record_id: str,
        status: CustomerStatus,
        effective_date: date | None,
        amount: Any = None,
        notes: str = "",
        documents: list[CustomerDocument] | None = None,
    ) -> Customer | None:
        """Resolve an active loan; invalid requests leave the record unchanged."""
        return self._update_resolution(apply_transition, record_id, status, effective_date, amount, notes, documents)

    def amend_status(
        self,
        record_id: str,
        status: CustomerStatus,
        effective_date: date | None,
        amount: Any = None,
        notes: str = "",
        documents: list[CustomerDocument] | None = None,
    ) -> Customer | None:
        """Correct the resolution of a settled loan."""
        return self._update_resolution(amend_resolution, record_id, status, effective_date, amount, notes, documents)

    def revert_status(self, record_id: str) -> Customer | None:
        customer = self.customers.get(record_id)
        if customer is None:
            self.log.warning("Cannot revert unknown customer %s", record_id)
            return None
        try:
            reverted = revert_to_active(customer)
        except InvalidTransitionError as exc:
            self.log.warning("Revert ignored: %s", exc)
            return None
        self.customers.upsert(reverted)
        return reverted

    # Marketing targets

    def save_target(self, target: MarketingTarget) -> None:
        self.targets.upsert(target)

    def delete_target(self, target_id: str) -> bool:
        return self.targets.delete(target_id)

    # Reporting

    def dashboard(self, today: date | None = None) -> Dashboard:
        today = today or date.today()
        customers = self.customers.get_all()
        return Dashboard(
            totals=disbursement_totals(customers, today),
            by_institution=count_by_institution(customers),
            by_marketing=totals_by_marketing(customers),
        )

    def export(self, report: str, today: date | None = None, output_dir: Path | None = None) -> Path | None:
        """Write a named report to a dated spreadsheet.

        Returns None, with a logged warning, when there is nothing to
        export or the file cannot be written.
        """
        if report not in REPORTS:
            self.log.warning("Unknown report %r", report)
            return None
        today = today or date.today()
        sheet_name = REPORTS[report][0]
        if report == "marketing":
            records: list[Any] = self.targets.get_all()
        elif report == "settled":
            records = resolved_customers(self.customers.get_all())
        else:
            records = self.customers.get_all()

        try:
            rows = report_rows(report, records)
            path = Path(output_dir or self.config.export.output_dir) / export_filename(
                sheet_name.replace(" ", "_"), today
            )
            return write_workbook(rows, sheet_name, path, self.config.export.column_width)
        except ExportError as exc:
            self.log.warning("Export of %s failed: %s", report, exc)
            return None

    # Extraction

    def extract_into(self, draft: LoanApplicationDraft, text: str) -> ExtractionResult:
        """Merge suggestions from pasted text into a draft.

        A failing or missing collaborator yields a notice; the draft is
        left as it was.
        """
        if self.extractor is None:
            return ExtractionResult(applied=[], notice="Text extraction is not configured")
        try:
            raw = self.extractor.extract(text)
        except (ExtractionError, ConfigurationError) as exc:
            self.log.warning("Extraction failed: %s", exc)
            return ExtractionResult(applied=[], notice=str(exc))
        try:
            applied = draft.merge_extracted(raw)
        except ValueError as exc:
            self.log.warning("Extraction result rejected: %s", exc)
            return ExtractionResult(applied=[], notice=str(exc))
        return ExtractionResult(applied=applied)

    def close(self) -> None:
        """Write pending drafts and stop observing storage."""
        self.drafts.flush()
        self.customers.close()
        self.targets.close()

    def _update_resolution(self, operation, record_id, status, effective_date, amount, notes, documents):
        customer = self.customers.get(record_id)
        if customer is None:
            self.log.warning("Status change for unknown customer %s ignored", record_id)
            return None
        try:
            updated = operation(
                customer,
                status,
                effective_date,
                amount=amount,
                notes=notes,
                documents=documents,
                policy=self.config.risk,
            )
        except (InvalidTransitionError, DocumentLimitError) as exc:
            self.log.warning("Status change ignored: %s", exc)
            return None
        self.customers.upsert(updated)
        return updated

    def _restore_draft(self, record_id: str | None) -> LoanApplicationDraft | None:
        data = self.drafts.load(record_id)
        if data is None:
            return None
        try:
            draft = LoanApplicationDraft.from_dict(data, self.config.fees, self.config.risk)
        except SchemaError as exc:
            self.log.warning("Discarding unreadable draft for %s: %s", record_id or "new record", exc)
            return None
        draft.record_id = record_id or draft.record_id
        return draft
