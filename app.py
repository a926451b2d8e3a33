import streamlit as st
from datetime import date
from loguru import logger

from catalog import load_catalog
from config import settings
from hsn_lookup import load_hsn_lookup
from invoice_generator import (
    generate_invoice_csv_bytes,
    generate_invoice_number,
    generate_invoice_pdf,
    generate_invoice_xlsx_bytes,
    issue_invoice,
)
from invoice_store import (
    InvoiceDraft,
    InvoiceNotReadyError,
    StockLimitError,
    check_ready,
    default_options,
    due_date_for,
    supply_is_intra_state,
)
from logging_config import setup_logging
from models import PAYMENT_TERM_LABELS, TRANSPORT_MODES, InvoiceOptions
from tax_calc import compute_line, gst_breakdown, money, tax_lines, total_payable
from utils import read_inventory_file

# ---------------------------------------------------
# PAGE CONFIG
# ---------------------------------------------------
st.set_page_config(page_title=settings.APP_NAME, layout="wide")

# ---------------------------------------------------
# SESSION STATE
# ---------------------------------------------------
if "catalog" not in st.session_state:
    setup_logging(settings.LOG_LEVEL)
    st.session_state.catalog = load_catalog(settings)
    st.session_state.hsn = load_hsn_lookup(settings.HSN_CSV)
    st.session_state.draft = InvoiceDraft.from_settings(settings)
    st.session_state.company = None
    st.session_state.options = default_options(settings)

catalog = st.session_state.catalog
hsn = st.session_state.hsn
draft = st.session_state.draft
seller = catalog.seller

# ---------------------------------------------------
# CUSTOM CSS STYLING
# ---------------------------------------------------
st.markdown("""
    <style>
        .main, .stApp {
            background-color: #f7faff;
        }
        h1, h2, h3, h4 {
            color: #0b5394;
        }
        .company-header {
            text-align: center;
            background-color: #008000;
            color: white;
            padding: 15px 0;
            border-radius: 8px;
            margin-bottom: 15px;
        }
        .company-header h2 {
            margin: 0;
            font-weight: 700;
        }
        .company-header p {
            margin: 2px 0;
            font-size: 13px;
        }
        .section-title {
            font-size: 22px;
            color: #008000;
            font-weight: 700;
            border-bottom: 2px solid #008000;
            margin-bottom: 12px;
            padding-bottom: 4px;
        }
        .summary-box {
            background-color: #eaf1fb;
            padding: 12px 18px;
            border-radius: 8px;
            font-weight: 600;
            margin-top: 15px;
            border-left: 4px solid #0b5394;
        }
    </style>
""", unsafe_allow_html=True)

# ---------------------------------------------------
# SELLER HEADER
# ---------------------------------------------------
st.markdown(f"""
<div class="company-header">
    <h2>{seller.name}</h2>
    <p>{seller.address}, {seller.city} - {seller.pincode}</p>
    <p>GSTIN: {seller.gst_no} | 📞 {seller.phone} | ✉️ {seller.email}</p>
</div>
""", unsafe_allow_html=True)

st.title("🧾 Tax Invoice Generator")

# ---------------------------------------------------
# SIDEBAR: INVENTORY MAINTENANCE
# ---------------------------------------------------
with st.sidebar:
    st.header("Inventory")
    name = st.text_input("Item Name", key="new_item_name")
    suggestion = hsn.suggest(name, limit=1) if (hsn and name) else []
    if suggestion:
        st.caption(f"Auto HSN: {suggestion[0]['hsn_code']} | GST Rate: {suggestion[0]['rate']:g}%")
    hsn_code = st.text_input("HSN Code", value=suggestion[0]["hsn_code"] if suggestion else "", key=f"new_item_hsn_{name}")
    rate = st.number_input("Rate", min_value=0.0, value=0.0, key="new_item_rate")
    stock = st.number_input("Stock", min_value=0, value=0, step=1, key="new_item_stock")
    unit = st.text_input("Unit", value="Pcs", key="new_item_unit")
    gst_options = [0.0, 5.0, 12.0, 18.0, 28.0]
    default_gst = suggestion[0]["rate"] if suggestion and suggestion[0]["rate"] in gst_options else 18.0
    gst_rate = st.selectbox("GST Rate %", gst_options, index=gst_options.index(default_gst), key=f"new_item_gst_{name}")
    if st.button("➕ Add Inventory Item"):
        if not name.strip():
            st.warning("Item name is required.")
        else:
            catalog.add_inventory_item(name, hsn_code, rate, stock, unit, gst_rate)
            st.success(f"{name} added to inventory")

    upload = st.file_uploader("Import inventory (CSV/XLSX)", type=["csv", "xlsx"])
    if upload and st.button("Import"):
        imported = read_inventory_file(upload.read(), upload.name, hsn)
        if imported:
            catalog.inventory = imported
            st.success(f"Loaded {len(imported)} items from {upload.name}")
        else:
            st.warning(f"No items found in {upload.name}")

# ---------------------------------------------------
# CUSTOMER
# ---------------------------------------------------
st.markdown('<div class="section-title">Customer</div>', unsafe_allow_html=True)

col1, col2 = st.columns([3, 1])
with col1:
    gst_no = st.text_input("Customer GST Number", max_chars=15, placeholder="e.g. 27AABCU9603R1ZM")
with col2:
    st.write("")
    if st.button("🔍 Find Customer"):
        found = catalog.find_company_by_gst(gst_no)
        if found:
            st.session_state.company = found
        else:
            st.error("Company not found. Please verify the GST number.")

with st.expander("Add new company"):
    with st.form("add_company", clear_on_submit=True):
        c_name = st.text_input("Company Name")
        c_phone = st.text_input("Contact Number")
        c_address = st.text_input("Address")
        c_gst = st.text_input("GST Number (optional)", max_chars=15)
        c_state = st.text_input("State")
        c_state_code = st.text_input("State Code", max_chars=2)
        c_balance = st.number_input("Previous Balance", min_value=0.0, value=0.0)
        if st.form_submit_button("Add Company"):
            if not c_name.strip() or not c_phone.strip():
                st.warning("Company name and contact number are required.")
            else:
                st.session_state.company = catalog.add_company(
                    c_name, c_address, c_gst, c_state, c_state_code, c_balance, c_phone
                )
                st.success(f"{c_name} has been added and selected")

company = st.session_state.company
if company:
    st.info(
        f"**{company.name}** | GSTIN: {company.gst_no} | {company.state} ({company.state_code}) | "
        f"Pending: ₹{money(company.pending_amount):,.2f}"
    )

# ---------------------------------------------------
# ITEMS
# ---------------------------------------------------
st.markdown('<div class="section-title">Invoice Items</div>', unsafe_allow_html=True)

labels = {i.id: f"{i.name} | HSN {i.hsn} | ₹{i.rate:,.2f} | Stock {i.stock} {i.unit}" for i in catalog.inventory}
col1, col2 = st.columns([3, 1])
with col1:
    picked = st.selectbox("Inventory", list(labels), format_func=labels.get) if labels else None
with col2:
    st.write("")
    if picked and st.button("➕ Add to Invoice"):
        try:
            draft.add_item(catalog.find_item(picked))
        except StockLimitError as e:
            st.error(f"Maximum stock reached. {e}")

same_state = supply_is_intra_state(company, seller)

if not draft.items:
    st.info("📝 No items added yet. Add items from the inventory list.")

for line in draft.items:
    cols = st.columns([3, 1, 1, 1, 1, 1, 1, 1])
    cols[0].markdown(f"**{line.item.name}**  \nHSN: {line.item.hsn} | GST: {line.item.gst_rate:g}%")
    max_qty = line.item.stock if draft.enforce_stock_cap else None
    qty = cols[1].number_input("Qty", min_value=1, max_value=max_qty, value=line.quantity, key=f"qty_{line.id}_{line.quantity}")
    if qty != line.quantity:
        draft.update_quantity(line.id, qty)
    new_rate = cols[2].number_input("Rate", min_value=0.0, value=float(line.item.rate), key=f"rate_{line.id}_{line.item.rate}")
    if new_rate != line.item.rate:
        draft.update_rate(line.id, new_rate)
    disc = cols[3].number_input("Disc %", min_value=0.0, max_value=100.0, value=float(line.discount), key=f"disc_{line.id}_{line.discount}")
    if disc != line.discount:
        draft.update_discount(line.id, disc)
    res = compute_line(draft.get(line.id), same_state)
    cols[4].metric("Taxable", f"₹{money(res['taxable']):,.2f}")
    cols[5].metric("GST", f"₹{money(res['gst']):,.2f}")
    cols[6].metric("Total", f"₹{money(res['line_total']):,.2f}")
    if cols[7].button("🗑️", key=f"rm_{line.id}"):
        draft.remove_item(line.id)
        st.rerun()

# ---------------------------------------------------
# OPTIONS
# ---------------------------------------------------
st.markdown('<div class="section-title">Invoice Options</div>', unsafe_allow_html=True)

opts = st.session_state.options
col1, col2 = st.columns(2)
with col1:
    terms_keys = list(PAYMENT_TERM_LABELS)
    terms = st.selectbox("Payment Terms", terms_keys, index=terms_keys.index(opts.payment_terms),
                         format_func=PAYMENT_TERM_LABELS.get)
    if terms == "custom":
        picked_due = st.date_input("Due Date", value=date.fromisoformat(opts.due_date), min_value=date.today())
        due = due_date_for(terms, custom_date=picked_due.isoformat())
    else:
        due = due_date_for(terms)
        st.caption(f"Due Date: {due}")
with col2:
    modes = list(TRANSPORT_MODES)
    mode = st.selectbox("Transport Mode", modes, index=modes.index(opts.transport_mode),
                        format_func=TRANSPORT_MODES.get)
    vehicle = st.text_input("Vehicle Number", value=opts.vehicle_no)
notes = st.text_area("Notes / Terms", value=opts.notes)
opts = st.session_state.options = InvoiceOptions(terms, due, notes, mode, vehicle)

# ---------------------------------------------------
# SUMMARY
# ---------------------------------------------------
totals = draft.totals()
if draft.items:
    gst_rows = "".join(
        f"{label}: ₹{money(amount):,.2f}<br>"
        for label, amount in tax_lines(gst_breakdown(draft.items, same_state), same_state)
    )
    pending = company.pending_amount if company else 0.0
    payable = (
        f"<br>Previous Balance: ₹{money(pending):,.2f}<br>"
        f"<b>Total Payable: ₹{money(total_payable(totals.grand_total, pending)):,.2f}</b>"
        if pending > 0 else ""
    )
    st.markdown(f"""
    <div class="summary-box">
        Subtotal (before discount): ₹{money(totals.subtotal + totals.total_discount):,.2f}<br>
        Discount: -₹{money(totals.total_discount):,.2f}<br>
        Taxable Amount: ₹{money(totals.subtotal):,.2f}<br>
        {gst_rows}
        Total GST: ₹{money(totals.total_gst):,.2f}<br>
        <b>Grand Total: ₹{money(totals.grand_total):,.2f}</b>
        {payable}
    </div>
    """, unsafe_allow_html=True)

# ---------------------------------------------------
# GENERATE INVOICE
# ---------------------------------------------------
st.markdown('<div class="section-title">Generate</div>', unsafe_allow_html=True)
payment_received = st.checkbox("Payment received for this invoice", value=True)

col1, col2 = st.columns(2)
with col1:
    generate = st.button("Generate Invoice")
with col2:
    if st.button("🔄 Clear Invoice"):
        draft.clear()
        st.session_state.company = None
        st.session_state.options = default_options(settings)
        st.session_state.pop("invoice", None)
        st.session_state.pop("issued_for", None)
        st.rerun()

if generate:
    try:
        check_ready(company, draft.items)
        # one invoice, and one balance update, per unchanged draft
        draft_key = (draft.items, company.id, opts, payment_received)
        if st.session_state.get("issued_for") == draft_key:
            st.info("Invoice already generated for this draft.")
        else:
            invoice, company = issue_invoice(
                draft.items,
                company,
                seller,
                opts,
                invoice_number=generate_invoice_number(),
                invoice_date=date.today().strftime("%d %b %Y"),
                bank=catalog.bank,
                payment_received=payment_received,
            )
            catalog.replace_company(company)
            st.session_state.company = company
            st.session_state.invoice = invoice
            st.session_state.issued_for = draft_key
    except InvoiceNotReadyError as e:
        st.warning(str(e))

invoice = st.session_state.get("invoice")
if invoice:
    file_stub = invoice["invoice_number"].replace("/", "_")
    try:
        pdf_bytes = generate_invoice_pdf(invoice)
    except Exception as e:
        logger.exception("PDF generation failed for {}", invoice["invoice_number"])
        st.error(f"Failed to generate PDF: {e}")
        pdf_bytes = None

    col1, col2, col3 = st.columns(3)
    with col1:
        if pdf_bytes:
            st.download_button("📄 Download Invoice (PDF)",
                               data=pdf_bytes,
                               file_name=f"Invoice_{file_stub}.pdf",
                               mime="application/pdf")
    with col2:
        st.download_button("📊 Download Invoice (CSV)",
                           data=generate_invoice_csv_bytes(invoice),
                           file_name=f"Invoice_{file_stub}.csv",
                           mime="text/csv")
    with col3:
        st.download_button("⬇️ Download Invoice (Excel)",
                           data=generate_invoice_xlsx_bytes(invoice),
                           file_name=f"Invoice_{file_stub}.xlsx",
                           mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
