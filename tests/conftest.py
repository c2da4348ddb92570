"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pytest

from coop_lending.engine import derive_terms
from coop_lending.models.lending import (
    Customer,
    CustomerDocument,
    CustomerStatus,
    DocumentCategory,
    DocumentType,
    InterestType,
    NominativeData,
    PensionData,
    PensionType,
    PersonalInfo,
)
from coop_lending.store import InMemoryStorage


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """A Wednesday, so week/month/year windows all start on different days."""
    return date(2025, 12, 17)


@pytest.fixture
def storage() -> InMemoryStorage:
    """Fresh shared in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def sample_nominative() -> NominativeData:
    """Annuity loan of 50M over 24 months at 35% a year."""
    return derive_terms(
        NominativeData(
            loan_date=date(2025, 1, 10),
            spk_code="SPK/0001/25",
            loan_amount=Decimal("50000000"),
            interest_type=InterestType.ANNUITY,
            interest_rate=Decimal("35"),
            tenure_months=24,
            disbursement_date=date(2025, 1, 10),
            admin_fee=Decimal("3750000"),
            provision_fee=Decimal("1250000"),
            marketing_fee=Decimal("2500000"),
            risk_reserve=Decimal("5500000"),
            principal_savings=Decimal("20000"),
            mandatory_savings=Decimal("100000"),
        )
    )


@pytest.fixture
def make_customer(sample_nominative: NominativeData) -> Callable[..., Customer]:
    """Factory for customers; keyword arguments override record fields."""

    def _make(
        customer_id: str = "cust-001",
        name: str = "Siti Aminah",
        institution: str = "PT Pos Indonesia",
        nominative: NominativeData | None = None,
        **overrides: Any,
    ) -> Customer:
        customer = Customer(
            id=customer_id,
            personal=PersonalInfo(full_name=name, nik="3201010101500001"),
            pension=PensionData(
                pension_number="1234567890123",
                former_institution=institution,
                pension_type=PensionType.TASPEN,
                sk_number="SK-001/2010",
                salary_amount=Decimal("4000000"),
            ),
            nominative=nominative or sample_nominative,
            created_at=datetime(2025, 1, 10, 9, 0),
            marketing_name="Budi",
        )
        for key, value in overrides.items():
            setattr(customer, key, value)
        return customer

    return _make


@pytest.fixture
def sample_customer(make_customer: Callable[..., Customer]) -> Customer:
    """Active customer with one SK document."""
    return make_customer(
        documents=[
            CustomerDocument(
                id="doc-sk",
                name="sk.pdf",
                type=DocumentType.PDF,
                category=DocumentCategory.SK,
                url="files/sk.pdf",
            )
        ],
        status=CustomerStatus.ACTIVE,
    )


@pytest.fixture
def doc_factory() -> Callable[[str, DocumentCategory], CustomerDocument]:
    """Factory for image documents in a category."""

    def _make(doc_id: str, category: DocumentCategory) -> CustomerDocument:
        return CustomerDocument(id=doc_id, name=f"{doc_id}.jpg", type=DocumentType.IMAGE, category=category, url=doc_id)

    return _make
