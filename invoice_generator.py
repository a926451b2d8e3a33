import random
from datetime import date
from io import BytesIO
from typing import Optional, Sequence, Tuple

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from invoice_store import apply_unpaid_balance, check_ready, supply_is_intra_state
from models import (
    PAYMENT_TERM_LABELS,
    TRANSPORT_MODES,
    BankDetails,
    Company,
    InvoiceLineItem,
    InvoiceOptions,
    Seller,
)
from tax_calc import aggregate, compute_line, gst_breakdown, money, tax_lines, total_payable


def generate_invoice_number(today: Optional[date] = None, rng=random) -> str:
    today = today or date.today()
    return f"INV/{today:%y%m}/{rng.randint(0, 9998):04d}"


def build_invoice(
    line_items: Sequence[InvoiceLineItem],
    company: Optional[Company],
    seller: Seller,
    options: InvoiceOptions,
    invoice_number: str,
    invoice_date: str,
    bank: Optional[BankDetails] = None,
) -> dict:
    """
    Assemble everything the printable invoice shows. Amounts are left
    unrounded; renderers round with `money` at draw time.
    """
    check_ready(company, line_items)
    line_items = tuple(line_items)
    same_state = supply_is_intra_state(company, seller)

    lines = []
    for sr, line in enumerate(line_items, start=1):
        res = compute_line(line, same_state)
        lines.append({
            "sr": sr,
            "description": line.item.name,
            "hsn": line.item.hsn,
            "qty": line.quantity,
            "unit": line.item.unit,
            "unit_price": float(line.item.rate),
            "discount_pct": float(line.discount),
            "gst_rate": float(line.item.gst_rate),
            "taxable": res["taxable"],
            "gst": res["gst"],
            "cgst": res["cgst"],
            "sgst": res["sgst"],
            "igst": res["igst"],
            "line_total": res["line_total"],
        })

    totals = aggregate(line_items)
    breakdown = gst_breakdown(line_items, same_state)
    pending = company.pending_amount or 0.0

    return {
        "invoice_number": invoice_number,
        "date": invoice_date,
        "seller": {
            "name": seller.name,
            "address": f"{seller.address}, {seller.city} - {seller.pincode}",
            "gstin": seller.gst_no,
            "state": seller.state,
            "state_code": seller.state_code,
            "phone": seller.phone,
            "email": seller.email,
        },
        "buyer": {
            "name": company.name,
            "address": company.address,
            "gstin": company.gst_no,
            "state": company.state,
            "state_code": company.state_code,
        },
        "same_state": same_state,
        "items": lines,
        "gst_lines": [{"label": label, "amount": amount} for label, amount in tax_lines(breakdown, same_state)],
        "totals": {
            "gross": totals.subtotal + totals.total_discount,
            "discount": totals.total_discount,
            "taxable_value": totals.subtotal,
            "cgst": sum(s.cgst for s in breakdown.values()),
            "sgst": sum(s.sgst for s in breakdown.values()),
            "igst": sum(s.igst for s in breakdown.values()),
            "total_gst": totals.total_gst,
            "grand_total": totals.grand_total,
            "previous_balance": pending,
            "total_payable": total_payable(totals.grand_total, pending),
        },
        "options": {
            "payment_terms": PAYMENT_TERM_LABELS.get(options.payment_terms, options.payment_terms),
            "due_date": options.due_date,
            "notes": options.notes,
            "transport_mode": TRANSPORT_MODES.get(options.transport_mode, options.transport_mode),
            "vehicle_no": options.vehicle_no,
        },
        "bank": None if bank is None else {
            "bank_name": bank.bank_name,
            "account_name": bank.account_name,
            "account_number": bank.account_number,
            "ifsc_code": bank.ifsc_code,
            "branch": bank.branch,
        },
    }


def issue_invoice(
    line_items: Sequence[InvoiceLineItem],
    company: Optional[Company],
    seller: Seller,
    options: InvoiceOptions,
    invoice_number: str,
    invoice_date: str,
    bank: Optional[BankDetails] = None,
    payment_received: bool = True,
) -> Tuple[dict, Company]:
    """
    Build the invoice against the customer's balance as it stood before this
    invoice, then carry the grand total forward when payment is outstanding.
    Returns the invoice and the (possibly updated) company.
    """
    invoice = build_invoice(line_items, company, seller, options, invoice_number, invoice_date, bank)
    if not payment_received:
        company = apply_unpaid_balance(company, invoice["totals"]["grand_total"])
    return invoice, company


def _rupees(val) -> str:
    # the built-in Helvetica has no rupee glyph
    return f"Rs. {money(val):,.2f}"


def generate_invoice_pdf(invoice_dict):
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    x, y = 40, height - 40

    def ensure_room(y, needed=100):
        if y < needed:
            c.showPage()
            c.setFont("Helvetica", 9)
            return height - 40
        return y

    # Header Section
    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(width/2, y, "TAX INVOICE")
    y -= 30

    # Invoice Details
    c.setFont("Helvetica", 10)
    c.drawString(x, y, f"Invoice: {invoice_dict['invoice_number']}")
    c.drawString(width/2, y, f"Date: {invoice_dict['date']}")
    y -= 15
    c.drawString(x, y, f"Due Date: {invoice_dict['options']['due_date']}")
    c.drawString(width/2, y, f"Terms: {invoice_dict['options']['payment_terms']}")
    y -= 25

    # Seller and Buyer blocks
    seller, buyer = invoice_dict["seller"], invoice_dict["buyer"]
    c.setFont("Helvetica-Bold", 10)
    c.drawString(x, y, "Seller")
    c.drawString(width/2, y, "Buyer")
    y -= 15
    c.setFont("Helvetica", 9)
    seller_rows = [
        seller["name"],
        seller["address"],
        f"GSTIN: {seller['gstin']}",
        f"State: {seller['state']} ({seller['state_code']})",
    ]
    buyer_rows = [
        buyer["name"],
        buyer["address"],
        f"GSTIN: {buyer['gstin']}",
        f"State: {buyer['state']} ({buyer['state_code']})",
    ]
    for left, right in zip(seller_rows, buyer_rows):
        c.drawString(x, y, str(left)[:55])
        c.drawString(width/2, y, str(right)[:55])
        y -= 13
    y -= 15

    # Table Header
    headers = ["Sr", "Description", "HSN", "Qty", "Rate", "Disc%", "GST%", "Amount"]
    positions = [x, x+25, x+205, x+255, x+315, x+385, x+430, x+475]

    def draw_header(y):
        c.setFont("Helvetica-Bold", 9)
        for header, pos in zip(headers, positions):
            c.drawString(pos, y, header)
        c.setFont("Helvetica", 9)
        return y - 18

    y = draw_header(y)

    # Table Items
    for item in invoice_dict['items']:
        c.drawString(positions[0], y, str(item['sr']))
        c.drawString(positions[1], y, str(item['description'])[:32])
        c.drawString(positions[2], y, str(item.get('hsn', '')))
        c.drawString(positions[3], y, f"{item['qty']} {item['unit']}")
        c.drawString(positions[4], y, f"{money(item['unit_price']):.2f}")
        c.drawString(positions[5], y, f"{item['discount_pct']:g}")
        c.drawString(positions[6], y, f"{item['gst_rate']:g}")
        c.drawString(positions[7], y, f"{money(item['taxable']):.2f}")
        y -= 15

        if y < 100:
            c.showPage()
            y = draw_header(height - 40)

    # Tax summary
    totals = invoice_dict["totals"]
    summary = [("Subtotal", totals["gross"])]
    if totals["discount"] > 0:
        summary.append(("Discount", -totals["discount"]))
    summary.append(("Taxable Amount", totals["taxable_value"]))
    summary.extend((row["label"], row["amount"]) for row in invoice_dict["gst_lines"])
    summary.append(("Total GST", totals["total_gst"]))

    y -= 10
    y = ensure_room(y, 100 + 14 * (len(summary) + 3))
    c.setFont("Helvetica", 9)
    for label, amount in summary:
        c.drawString(positions[4], y, label)
        c.drawRightString(width - 40, y, _rupees(amount))
        y -= 14

    c.setFont("Helvetica-Bold", 10)
    c.drawString(positions[4], y, "Grand Total:")
    c.drawRightString(width - 40, y, _rupees(totals["grand_total"]))
    y -= 16
    if totals["previous_balance"] > 0:
        c.setFont("Helvetica", 9)
        c.drawString(positions[4], y, "Previous Balance")
        c.drawRightString(width - 40, y, _rupees(totals["previous_balance"]))
        y -= 14
        c.setFont("Helvetica-Bold", 10)
        c.drawString(positions[4], y, "Total Payable:")
        c.drawRightString(width - 40, y, _rupees(totals["total_payable"]))
        y -= 16

    # Transport, bank and notes
    opts = invoice_dict["options"]
    footer = [f"Transport: {opts['transport_mode']}"]
    if opts["vehicle_no"]:
        footer[0] += f" | Vehicle No: {opts['vehicle_no']}"
    bank = invoice_dict.get("bank")
    if bank:
        footer.append(f"Bank: {bank['bank_name']} | A/c {bank['account_number']} | IFSC {bank['ifsc_code']}")
    if opts["notes"]:
        footer.append(f"Notes: {opts['notes']}")

    y -= 10
    c.setFont("Helvetica", 9)
    for row in footer:
        y = ensure_room(y, 60)
        c.drawString(x, y, row[:110])
        y -= 13

    c.showPage()
    c.save()
    buffer.seek(0)
    return buffer.read()


def _items_frame(invoice_dict) -> pd.DataFrame:
    df = pd.DataFrame(invoice_dict['items'])
    money_cols = ["unit_price", "taxable", "gst", "cgst", "sgst", "igst", "line_total"]
    for col in money_cols:
        if col in df.columns:
            df[col] = df[col].map(money)
    return df


def _totals_frame(invoice_dict) -> pd.DataFrame:
    return pd.DataFrame([{k: money(v) for k, v in invoice_dict['totals'].items()}])


def generate_invoice_xlsx_bytes(invoice_dict):
    buffer = BytesIO()

    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        _items_frame(invoice_dict).to_excel(writer, index=False, sheet_name="Items")
        pd.DataFrame(invoice_dict['gst_lines']).to_excel(writer, index=False, sheet_name="GST")
        _totals_frame(invoice_dict).to_excel(writer, index=False, sheet_name="Totals")

    buffer.seek(0)
    return buffer.getvalue()


def generate_invoice_csv_bytes(invoice_dict):
    df = _items_frame(invoice_dict)
    buffer = BytesIO()
    buffer.write(df.to_csv(index=False).encode('utf-8'))
    buffer.seek(0)
    return buffer.getvalue()
