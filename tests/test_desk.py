"""Tests for the loan desk facade."""

import json
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from openpyxl import load_workbook

from coop_lending.config import ExtractionConfig, LendingConfig, StorageConfig
from coop_lending.desk import LendingDesk
from coop_lending.editor import LoanApplicationDraft
from coop_lending.exceptions import ExtractionError
from coop_lending.extraction import GeminiExtractor
from coop_lending.models.lending import Customer, CustomerStatus, LoanType, MarketingTarget
from coop_lending.reporting import InstitutionBucket
from coop_lending.store import InMemoryStorage


@pytest.fixture
def desk(storage: InMemoryStorage) -> LendingDesk:
    return LendingDesk(storage=storage, session_id="desk-1")


@pytest.fixture
def seeded_desk(desk: LendingDesk, sample_customer: Customer) -> LendingDesk:
    desk.customers.upsert(sample_customer)
    return desk


class TestCustomerFlow:
    """Tests for saving, editing and deleting customers."""

    def test_save_new_customer(self, desk: LendingDesk) -> None:
        draft = desk.open_draft()
        draft.update_personal(full_name="Baru")
        draft.update_nominative(loan_amount=20_000_000, tenure_months=12, interest_rate=24)
        desk.stage_draft(draft)
        desk.drafts.flush()

        customer = desk.save_customer(draft)

        assert desk.customers.get_all() == [customer]
        assert customer.status == CustomerStatus.ACTIVE
        assert desk.drafts.load(None) is None
        assert desk.ui.editing_id is None
        assert desk.ui.active_tab == "list"

    def test_edit_existing_keeps_position(self, seeded_desk: LendingDesk, make_customer: Callable) -> None:
        seeded_desk.customers.upsert(make_customer("newer"))
        draft = seeded_desk.open_draft("cust-001")
        assert seeded_desk.ui.editing_id == "cust-001"

        draft.update_personal(full_name="Siti A.")
        seeded_desk.save_customer(draft)

        assert [c.id for c in seeded_desk.customers.get_all()] == ["newer", "cust-001"]
        assert seeded_desk.customers.get("cust-001").personal.full_name == "Siti A."

    def test_open_unknown_customer(self, desk: LendingDesk) -> None:
        assert desk.open_draft("missing") is None

    def test_saved_draft_restored(self, seeded_desk: LendingDesk) -> None:
        draft = seeded_desk.open_draft("cust-001")
        draft.update_personal(address="Jl. Merdeka 1")
        seeded_desk.stage_draft(draft)
        seeded_desk.drafts.flush()

        reopened = seeded_desk.open_draft("cust-001")

        assert reopened.personal.address == "Jl. Merdeka 1"

    def test_delete_clears_draft_and_pointer(self, seeded_desk: LendingDesk) -> None:
        draft = seeded_desk.open_draft("cust-001")
        seeded_desk.stage_draft(draft)
        seeded_desk.drafts.flush()

        assert seeded_desk.delete_customer("cust-001") is True

        assert seeded_desk.customers.get_all() == []
        assert seeded_desk.drafts.load("cust-001") is None
        assert seeded_desk.ui.editing_id is None

    def test_delete_other_keeps_pointer(self, seeded_desk: LendingDesk, make_customer: Callable) -> None:
        seeded_desk.customers.upsert(make_customer("other"))
        seeded_desk.open_draft("cust-001")

        seeded_desk.delete_customer("other")

        assert seeded_desk.ui.editing_id == "cust-001"

    def test_collections_reloaded(self, seeded_desk: LendingDesk, storage: InMemoryStorage) -> None:
        other = LendingDesk(storage=storage, session_id="desk-2")
        assert [c.id for c in other.customers.get_all()] == ["cust-001"]


class TestTopUp:
    """Tests for the top-up handler."""

    def test_topup_overwrites_same_record(self, seeded_desk: LendingDesk) -> None:
        draft = seeded_desk.start_topup("cust-001", today=date(2025, 12, 17))
        draft.update_nominative(loan_amount=80_000_000)

        saved = seeded_desk.save_customer(draft)

        assert len(seeded_desk.customers) == 1
        assert saved.nominative.loan_type == LoanType.TOPUP
        assert saved.nominative.repayment_amount > 0
        assert saved.nominative.admin_fee == Decimal("6000000")
        assert saved.nominative.maturity_date is not None

    def test_topup_unavailable(self, seeded_desk: LendingDesk) -> None:
        seeded_desk.change_status("cust-001", CustomerStatus.CANCELLED, date(2025, 12, 1))

        assert seeded_desk.start_topup("cust-001") is None
        assert seeded_desk.start_topup("missing") is None


class TestStatusChanges:
    """Tests for the lifecycle handlers."""

    def test_change_and_revert(self, seeded_desk: LendingDesk) -> None:
        resolved = seeded_desk.change_status("cust-001", CustomerStatus.PKA, date(2025, 12, 1))
        assert seeded_desk.customers.get("cust-001").status == CustomerStatus.PKA
        assert resolved.resolution_amount == Decimal("25000000")

        amended = seeded_desk.amend_status("cust-001", CustomerStatus.PKA, date(2025, 12, 2), amount=1_000_000)
        assert amended.resolution_amount == Decimal("1000000")

        seeded_desk.revert_status("cust-001")
        assert seeded_desk.customers.get("cust-001").status == CustomerStatus.ACTIVE

    def test_invalid_change_is_noop(self, seeded_desk: LendingDesk) -> None:
        before = seeded_desk.customers.get("cust-001")

        assert seeded_desk.change_status("cust-001", CustomerStatus.PKA, None) is None
        assert seeded_desk.revert_status("cust-001") is None
        assert seeded_desk.change_status("missing", CustomerStatus.PKA, date(2025, 1, 1)) is None
        assert seeded_desk.customers.get("cust-001") == before


class TestReporting:
    """Tests for dashboard and export."""

    def test_dashboard(self, seeded_desk: LendingDesk) -> None:
        dashboard = seeded_desk.dashboard(today=date(2025, 12, 17))

        assert dashboard.totals.portfolio_count == 1
        assert dashboard.totals.year_principal == Decimal("50000000")
        assert dashboard.by_institution[InstitutionBucket.POS] == 1
        assert dashboard.by_marketing[0].name == "Budi"

    def test_export_master(self, seeded_desk: LendingDesk, tmp_path: Path) -> None:
        path = seeded_desk.export("master", today=date(2025, 12, 17), output_dir=tmp_path)

        assert path.name == "Master_Database_KJAM_2025-12-17.xlsx"
        assert load_workbook(path).active["C2"].value == "Siti Aminah"

    def test_export_settled_only_resolved(self, seeded_desk: LendingDesk, tmp_path: Path) -> None:
        assert seeded_desk.export("settled", output_dir=tmp_path) is None

        seeded_desk.change_status("cust-001", CustomerStatus.SETTLED_PLAIN, date(2025, 12, 1))
        assert seeded_desk.export("settled", output_dir=tmp_path) is not None

    def test_export_marketing(self, desk: LendingDesk, tmp_path: Path) -> None:
        desk.save_target(MarketingTarget(id="t1", name="Ani", target_amount=Decimal("100")))

        assert desk.export("marketing", output_dir=tmp_path) is not None
        assert desk.delete_target("t1") is True

    def test_unknown_report(self, desk: LendingDesk, tmp_path: Path) -> None:
        assert desk.export("ledger", output_dir=tmp_path) is None


class TestExtraction:
    """Tests for extraction with notices."""

    def test_merges_suggestions(self, storage: InMemoryStorage) -> None:
        extractor = MagicMock()
        extractor.extract.return_value = {"fullName": "Ahmad", "loanAmount": 10_000_000}
        desk = LendingDesk(storage=storage, extractor=extractor)
        draft = LoanApplicationDraft()

        result = desk.extract_into(draft, "Ahmad minta 10 juta")

        assert result.notice is None
        assert set(result.applied) == {"fullName", "loanAmount"}
        assert draft.personal.full_name == "Ahmad"

    def test_failure_keeps_draft(self, storage: InMemoryStorage) -> None:
        extractor = MagicMock()
        extractor.extract.side_effect = ExtractionError("service unavailable")
        desk = LendingDesk(storage=storage, extractor=extractor)
        draft = LoanApplicationDraft()
        draft.update_personal(full_name="Typed")

        result = desk.extract_into(draft, "text")

        assert result.notice == "service unavailable"
        assert result.applied == []
        assert draft.personal.full_name == "Typed"

    def test_out_of_range_amounts_do_not_raise(self, storage: InMemoryStorage) -> None:
        extractor = MagicMock()
        extractor.extract.return_value = {"loanAmount": 1e30, "interestRate": -2400, "tenureMonths": 12}
        desk = LendingDesk(storage=storage, extractor=extractor)
        draft = LoanApplicationDraft()

        result = desk.extract_into(draft, "plafon 1e30")

        assert result.notice is None
        assert draft.nominative.loan_amount == 0
        assert draft.nominative.monthly_installment == 0

    def test_not_configured(self, desk: LendingDesk) -> None:
        assert desk.extract_into(LoanApplicationDraft(), "text").notice is not None


class TestDeskConfiguration:
    """Tests for config-driven wiring."""

    def test_uses_configured_path(self, tmp_path: Path, sample_customer: Customer) -> None:
        path = tmp_path / "storage.json"
        config = LendingConfig(storage=StorageConfig(path=path))

        LendingDesk(config).customers.upsert(sample_customer)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert json.loads(data["koperasi_customers_db"])[0]["id"] == "cust-001"
        assert len(LendingDesk(config).customers) == 1

    def test_configured_api_key_builds_gemini(self, storage: InMemoryStorage) -> None:
        config = LendingConfig(extraction=ExtractionConfig(api_key="key"))

        with patch("coop_lending.extraction.gemini.genai") as genai:
            desk = LendingDesk(config, storage=storage)

        assert isinstance(desk.extractor, GeminiExtractor)
        genai.Client.assert_called_once_with(api_key="key")
