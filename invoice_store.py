import itertools
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from models import (
    PAYMENT_TERMS,
    Company,
    InventoryItem,
    InvoiceLineItem,
    InvoiceOptions,
    Seller,
)
from tax_calc import InvoiceTotals, GstSplit, aggregate, gst_breakdown, is_same_state


class StockLimitError(Exception):
    """Raised when adding an item would exceed the stock on hand."""


class LineItemNotFoundError(KeyError):
    pass


class InvoiceNotReadyError(Exception):
    """The invoice is missing a customer or items and cannot be exported."""


def clamp_discount(discount) -> float:
    return min(100.0, max(0.0, float(discount or 0)))


class InvoiceDraft:
    """
    Ordered line items of the invoice being drafted.

    Every mutation replaces the affected line, so `items` snapshots handed to
    the tax engine never change underneath it.
    """

    def __init__(self, enforce_stock_cap: bool = True, initial_rate: Optional[float] = None):
        self.enforce_stock_cap = enforce_stock_cap
        self.initial_rate = initial_rate
        self._lines: List[InvoiceLineItem] = []
        self._ids = itertools.count(1)

    @classmethod
    def from_settings(cls, settings) -> "InvoiceDraft":
        return cls(
            enforce_stock_cap=settings.ENFORCE_STOCK_CAP,
            initial_rate=settings.INITIAL_RATE_OVERRIDE,
        )

    @property
    def items(self) -> Tuple[InvoiceLineItem, ...]:
        return tuple(self._lines)

    def __len__(self):
        return len(self._lines)

    def _index(self, line_id: str) -> int:
        for idx, line in enumerate(self._lines):
            if line.id == line_id:
                return idx
        raise LineItemNotFoundError(line_id)

    def _cap(self, line: InvoiceLineItem, quantity: int) -> int:
        quantity = max(1, int(quantity))
        if self.enforce_stock_cap:
            quantity = min(quantity, line.item.stock)
        return quantity

    def get(self, line_id: str) -> InvoiceLineItem:
        return self._lines[self._index(line_id)]

    def add_item(self, item: InventoryItem) -> InvoiceLineItem:
        """Add an inventory item, or bump its quantity if it is already on the invoice."""
        for idx, line in enumerate(self._lines):
            if line.item.id != item.id:
                continue
            if self.enforce_stock_cap and line.quantity >= line.item.stock:
                raise StockLimitError(
                    f"Cannot add more {item.name}. Available: {item.stock} {item.unit}"
                )
            updated = replace(line, quantity=line.quantity + 1)
            self._lines[idx] = updated
            logger.debug("Increased {} to {}", item.name, updated.quantity)
            return updated

        if self.enforce_stock_cap and item.stock < 1:
            raise StockLimitError(f"{item.name} is out of stock")

        if self.initial_rate is not None:
            item = replace(item, rate=float(self.initial_rate))
        line = InvoiceLineItem(id=f"line-{next(self._ids)}", item=item, quantity=1, discount=0.0)
        self._lines.append(line)
        logger.info("Added {} to invoice", item.name)
        return line

    def update_quantity(self, line_id: str, quantity) -> InvoiceLineItem:
        idx = self._index(line_id)
        line = self._lines[idx]
        self._lines[idx] = replace(line, quantity=self._cap(line, quantity))
        return self._lines[idx]

    def update_discount(self, line_id: str, discount) -> InvoiceLineItem:
        idx = self._index(line_id)
        self._lines[idx] = replace(self._lines[idx], discount=clamp_discount(discount))
        return self._lines[idx]

    def update_rate(self, line_id: str, rate) -> InvoiceLineItem:
        """Manual unit-rate entry for this line only; the catalog item is untouched."""
        idx = self._index(line_id)
        line = self._lines[idx]
        item = replace(line.item, rate=max(0.0, float(rate or 0)))
        self._lines[idx] = replace(line, item=item)
        return self._lines[idx]

    def remove_item(self, line_id: str) -> None:
        removed = self._lines.pop(self._index(line_id))
        logger.info("Removed {} from invoice", removed.item.name)

    def clear(self) -> None:
        self._lines = []

    def totals(self) -> InvoiceTotals:
        return aggregate(self.items)

    def breakdown(self, company: Optional[Company], seller: Seller) -> Dict[float, GstSplit]:
        return gst_breakdown(self.items, supply_is_intra_state(company, seller))


def supply_is_intra_state(company: Optional[Company], seller: Seller) -> bool:
    if company is None:
        return False
    return is_same_state(company.state_code, seller.state_code)


def due_date_for(terms: str, today: Optional[date] = None, custom_date: Optional[str] = None) -> str:
    """ISO due date for a payment-terms keyword. Unknown keywords fall back to 30 days."""
    today = today or date.today()
    if terms == "custom":
        return custom_date or today.isoformat()
    days = PAYMENT_TERMS.get(terms)
    if days is None:
        days = 30
    return (today + timedelta(days=days)).isoformat()


def default_options(settings, today: Optional[date] = None) -> InvoiceOptions:
    terms = settings.DEFAULT_PAYMENT_TERMS
    return InvoiceOptions(
        payment_terms=terms,
        due_date=due_date_for(terms, today),
        notes="",
        transport_mode=settings.DEFAULT_TRANSPORT_MODE,
        vehicle_no="",
    )


def apply_unpaid_balance(company: Company, grand_total: float) -> Company:
    """Carry an unpaid invoice forward onto the customer's pending balance."""
    updated = replace(company, pending_amount=(company.pending_amount or 0.0) + grand_total)
    logger.info("Pending balance for {} is now {:.2f}", company.name, updated.pending_amount)
    return updated


def check_ready(company: Optional[Company], line_items: Sequence[InvoiceLineItem]) -> None:
    if company is None:
        raise InvoiceNotReadyError("Please select a customer by entering their GST number")
    if not line_items:
        raise InvoiceNotReadyError("Please add at least one item to the invoice")
