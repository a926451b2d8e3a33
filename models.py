from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    hsn: str
    rate: float
    stock: int
    unit: str
    gst_rate: float


@dataclass(frozen=True)
class Company:
    id: str
    gst_no: str
    name: str
    address: str
    state: str
    state_code: str
    pending_amount: float = 0.0
    last_transaction: Optional[str] = None
    phone: str = ""


@dataclass(frozen=True)
class InvoiceLineItem:
    """One line on the invoice being drafted. `discount` is a percentage (0-100)."""
    id: str
    item: InventoryItem
    quantity: int
    discount: float = 0.0


@dataclass(frozen=True)
class Seller:
    name: str
    address: str
    city: str
    state: str
    state_code: str
    pincode: str
    gst_no: str
    pan: str
    phone: str
    email: str


@dataclass(frozen=True)
class BankDetails:
    bank_name: str
    account_name: str
    account_number: str
    ifsc_code: str
    branch: str


# payment terms keyword -> days until due (None for a manually chosen date)
PAYMENT_TERMS = {
    "immediate": 0,
    "7days": 7,
    "15days": 15,
    "30days": 30,
    "45days": 45,
    "60days": 60,
    "custom": None,
}

PAYMENT_TERM_LABELS = {
    "immediate": "Immediate Payment",
    "7days": "Net 7 Days",
    "15days": "Net 15 Days",
    "30days": "Net 30 Days",
    "45days": "Net 45 Days",
    "60days": "Net 60 Days",
    "custom": "Custom Date",
}

TRANSPORT_MODES = {
    "road": "By Road",
    "rail": "By Rail",
    "air": "By Air",
    "ship": "By Ship",
    "courier": "By Courier",
}


@dataclass(frozen=True)
class InvoiceOptions:
    payment_terms: str
    due_date: str
    notes: str = ""
    transport_mode: str = "road"
    vehicle_no: str = ""
