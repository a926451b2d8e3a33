from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Tuple

from models import InventoryItem, InvoiceLineItem


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float = 0.0
    total_discount: float = 0.0
    total_gst: float = 0.0
    grand_total: float = 0.0


@dataclass(frozen=True)
class GstSplit:
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0


def line_taxable_amount(item: InventoryItem, quantity, discount_pct) -> float:
    """Line value after discount. Callers clamp `discount_pct` to [0, 100]."""
    return item.rate * quantity * (1 - discount_pct / 100)


def line_discount_amount(item: InventoryItem, quantity, discount_pct) -> float:
    return item.rate * quantity * discount_pct / 100


def line_gst_amount(item: InventoryItem, taxable_amount) -> float:
    return taxable_amount * item.gst_rate / 100


def line_total(taxable_amount, gst_amount) -> float:
    return taxable_amount + gst_amount


def is_same_state(buyer_state_code, seller_state_code) -> bool:
    """Intra-state supply when both parties share the 2-digit state code."""
    return buyer_state_code == seller_state_code


def compute_line(line: InvoiceLineItem, same_state: bool) -> Dict[str, float]:
    """
    Compute tax breakdown for one invoice line.
    If same_state → CGST + SGST
    Else → IGST
    """
    taxable = line_taxable_amount(line.item, line.quantity, line.discount)
    gst = line_gst_amount(line.item, taxable)
    igst = cgst = sgst = 0.0
    if same_state:
        cgst = gst / 2
        sgst = gst / 2
    else:
        igst = gst

    return {
        "gross": line.item.rate * line.quantity,
        "discount": line_discount_amount(line.item, line.quantity, line.discount),
        "taxable": taxable,
        "gst": gst,
        "cgst": cgst,
        "sgst": sgst,
        "igst": igst,
        "line_total": line_total(taxable, gst),
    }


def aggregate(line_items: Iterable[InvoiceLineItem]) -> InvoiceTotals:
    subtotal = total_discount = total_gst = 0.0
    for line in line_items:
        taxable = line_taxable_amount(line.item, line.quantity, line.discount)
        subtotal += taxable
        total_discount += line_discount_amount(line.item, line.quantity, line.discount)
        total_gst += line_gst_amount(line.item, taxable)

    return InvoiceTotals(
        subtotal=subtotal,
        total_discount=total_discount,
        total_gst=total_gst,
        grand_total=subtotal + total_gst,
    )


def gst_breakdown(line_items: Iterable[InvoiceLineItem], same_state: bool) -> Dict[float, GstSplit]:
    """
    Group line GST by the item's nominal GST rate (18, not 9).
    Each group is either split evenly into CGST/SGST or reported whole as IGST.
    """
    groups: Dict[float, float] = {}
    for line in line_items:
        taxable = line_taxable_amount(line.item, line.quantity, line.discount)
        rate = line.item.gst_rate
        groups[rate] = groups.get(rate, 0.0) + line_gst_amount(line.item, taxable)

    breakdown = {}
    for rate, amount in groups.items():
        if same_state:
            breakdown[rate] = GstSplit(cgst=amount / 2, sgst=amount / 2)
        else:
            breakdown[rate] = GstSplit(igst=amount)
    return breakdown


def _rate_label(rate) -> str:
    return f"{float(rate):g}"


def tax_lines(breakdown: Dict[float, GstSplit], same_state: bool) -> List[Tuple[str, float]]:
    """Display rows for a breakdown: half rates for CGST/SGST, full rate for IGST."""
    rows = []
    for rate, split in breakdown.items():
        if same_state:
            rows.append((f"CGST @ {_rate_label(rate / 2)}%", split.cgst))
            rows.append((f"SGST @ {_rate_label(rate / 2)}%", split.sgst))
        else:
            rows.append((f"IGST @ {_rate_label(rate)}%", split.igst))
    return rows


def total_payable(grand_total, pending_balance) -> float:
    """Grand total plus the customer's carried-forward balance (not floored)."""
    return grand_total + (pending_balance or 0.0)


def money(val) -> float:
    """Round half-up to 2 decimals for display. Never feed the result back into totals."""
    return float(Decimal(str(float(val))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
