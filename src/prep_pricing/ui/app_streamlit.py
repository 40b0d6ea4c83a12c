"""
Streamlit UI for shipment pricing.

Features:
- Shipment builder (product, box, pallet, container)
- Editable lines with live re-pricing on every change
- Additional services and discount
- Invoice summary with tax-excluded notice and CSV export
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from prep_pricing.config.settings import get_settings
from prep_pricing.engine import PricingEngine, DiscountSpec, ShipmentRequest
from prep_pricing.engine.errors import PricingError
from prep_pricing.engine.models import (
    AdditionalServiceKind,
    ContainerSize,
    PalletSubKind,
    ProductType,
    ServiceType,
    ShipmentKind,
)
from prep_pricing.engine.money import format_currency
from prep_pricing.logging_config import setup_logging
from prep_pricing.ui.editor import items_from_frame


st.set_page_config(
    page_title="Prep Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    setup_logging()
    return PricingEngine()


try:
    engine = get_engine()
    settings = get_settings()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Shipment Configuration
# ============================================================================
with st.sidebar:
    st.header("📦 Shipment")

    with st.container(border=True):
        owners = engine.catalog.owners or ["demo"]
        owner_id = st.selectbox("Customer", options=owners)
        kind = ShipmentKind(st.radio(
            "Shipment Type",
            options=[k.value for k in ShipmentKind],
            format_func=lambda v: v.title(),
            horizontal=True,
        ))

        service = product_type = pallet_sub_kind = container_size = None
        if kind is ShipmentKind.PRODUCT:
            service = ServiceType(st.selectbox("Service", [s.value for s in ServiceType]))
            product_type = ProductType(st.selectbox("Product Type", [p.value for p in ProductType]))
        elif kind is ShipmentKind.PALLET:
            pallet_sub_kind = PalletSubKind(st.selectbox(
                "Pallet Type",
                [p.value for p in PalletSubKind],
                format_func=lambda v: v.replace('_', ' ').title(),
            ))
        elif kind is ShipmentKind.CONTAINER:
            container_size = ContainerSize(st.selectbox("Container Size", [c.value for c in ContainerSize]))

    st.divider()
    stats = engine.catalog.stats()
    st.caption(f"🔧 {stats['rules']} rates · {stats['flat_rates']} flat rates loaded")
    if st.button("🔄 Reload Pricing", use_container_width=True):
        engine.reload_data()
        st.rerun()


# ============================================================================
# MAIN CONTENT
# ============================================================================
st.title("Shipment Pricing")
st.caption(f"v1.0 | Pricing Engine Active | {datetime.now().strftime('%Y-%m-%d')}")

col1, col2 = st.columns([1.8, 1.2], gap="large")

with col1:
    st.subheader("Lines")

    if 'lines' not in st.session_state:
        st.session_state.lines = pd.DataFrame([{"Description": "Item 1", "Quantity": 10, "Pack Of": 1}])

    edited = st.data_editor(
        st.session_state.lines,
        num_rows="dynamic",
        use_container_width=True,
        column_config={
            "Quantity": st.column_config.NumberColumn(min_value=1, step=1),
            "Pack Of": st.column_config.NumberColumn(min_value=1, step=1, disabled=kind is not ShipmentKind.PRODUCT),
        },
        key="lines_editor",
    )

    try:
        items = items_from_frame(edited)
    except PricingError as e:
        st.error(str(e))
        items = []

    with st.expander("➕ Additional Services"):
        selected = []
        quantities = {}
        for service_kind in AdditionalServiceKind:
            c1, c2 = st.columns([2, 1])
            with c1:
                picked = st.checkbox(service_kind.label, key=f"svc_{service_kind.value}")
            with c2:
                qty = st.number_input(
                    f"Qty ({service_kind.unit})", min_value=0, value=0, step=1,
                    key=f"svc_qty_{service_kind.value}", disabled=not picked,
                )
            if picked:
                selected.append(service_kind)
                quantities[service_kind] = int(qty)

    with st.expander("🏷️ Discount"):
        discount_type = st.radio("Type", ["none", "amount", "percent"], horizontal=True)
        discount_value = st.number_input("Value", min_value=0.0, value=0.0, step=1.0)
        discount = None if discount_type == "none" else DiscountSpec(type=discount_type, value=discount_value)

with col2:
    st.subheader("Invoice Summary")

    with st.container(border=True):
        if not items:
            st.info("Add at least one line to see pricing")
        else:
            request = ShipmentRequest(
                owner_id=owner_id,
                kind=kind,
                items=items,
                service=service,
                product_type=product_type,
                pallet_sub_kind=pallet_sub_kind,
                container_size=container_size,
                selected_services=frozenset(selected),
                service_quantities=quantities,
            )
            try:
                invoice = engine.build_invoice(request, discount=discount, finalize=False)
            except PricingError as e:
                st.error(str(e))
                st.stop()

            symbol = settings.currency_symbol
            m1, m2 = st.columns(2)
            m1.metric("Grand Total", format_currency(invoice.grand_total, symbol))
            m2.metric("Lines", len(invoice.lines))

            st.divider()
            st.markdown(f"Items Subtotal: **{format_currency(invoice.items_subtotal, symbol)}**")
            if invoice.service_charges:
                for charge in invoice.service_charges:
                    st.caption(
                        f"{charge.kind.label}: {charge.quantity} {charge.kind.unit} × "
                        f"{format_currency(charge.unit_price, symbol)} = {format_currency(charge.amount, symbol)}"
                    )
                st.markdown(
                    f"Additional Services: **{format_currency(invoice.additional_services_total, symbol)}**"
                )
            if invoice.discount_amount > 0:
                st.markdown(f":green[Discount: -{format_currency(invoice.discount_amount, symbol)}]")
            st.caption(invoice.tax_notice)

            for warning in invoice.warnings:
                st.warning(warning)
            for line in invoice.lines:
                if line.needs_admin_pricing and not line.warnings:
                    st.info(f"{line.description}: {line.pricing_note}")

            st.divider()
            export_df = pd.DataFrame([{
                'Description': line.description,
                'Package': line.package.value if line.package else '',
                'Quantity': line.quantity,
                'Pack Of': line.pack_of,
                'Unit Price': f"{line.unit_price:.2f}",
                'Total': f"{line.total_price:.2f}",
            } for line in invoice.lines])

            st.download_button(
                "📥 CSV",
                data=export_df.to_csv(index=False),
                file_name=f"invoice_{owner_id}.csv",
                mime="text/csv",
                use_container_width=True
            )

            with st.expander("🔍 Resolution Details"):
                for line in invoice.lines:
                    st.markdown(f"**{line.description}**")
                    st.code(line.get_trace_text(), language=None)
