"""Shared fixtures for the invoice generator test suite."""

from datetime import date

import pytest

from catalog import SELLER, Catalog
from invoice_store import InvoiceDraft
from models import Company, InventoryItem, InvoiceLineItem, InvoiceOptions


@pytest.fixture
def steel() -> InventoryItem:
    return InventoryItem("1", "Steel Bars (10mm)", "7214", 5500, 150, "MT", 18)


@pytest.fixture
def bricks() -> InventoryItem:
    return InventoryItem("4", "Bricks (Red)", "6901", 8, 10000, "Pcs", 5)


@pytest.fixture
def paint() -> InventoryItem:
    return InventoryItem("9", "Paint (Exterior)", "3208", 2400, 3, "Bucket", 28)


@pytest.fixture
def seller():
    return SELLER


@pytest.fixture
def local_company() -> Company:
    """Same state as the seller (Maharashtra, 27)."""
    return Company("1", "27AABCU9603R1ZM", "Sharma Constructions Pvt Ltd",
                   "123, Industrial Area, Sector 5", "Maharashtra", "27", 125000, "2025-01-15")


@pytest.fixture
def delhi_company() -> Company:
    return Company("3", "07AAACR5055K1Z6", "Raj Builders & Developers",
                   "789, Commercial Complex, Ring Road", "Delhi", "07", 45000, "2025-02-01")


@pytest.fixture
def steel_line(steel) -> InvoiceLineItem:
    return InvoiceLineItem("line-1", steel, quantity=2, discount=10)


@pytest.fixture
def options() -> InvoiceOptions:
    return InvoiceOptions("30days", "2026-11-18", "Goods once sold will not be taken back", "road", "MH12AB1234")


@pytest.fixture
def catalog() -> Catalog:
    return Catalog()


@pytest.fixture
def draft() -> InvoiceDraft:
    return InvoiceDraft()


@pytest.fixture
def today() -> date:
    return date(2026, 10, 19)
