# app.py
# Streamlit front end for FormHouse
# Flow:
# 1) Pick a service from the catalog
# 2) See the documents checklist
# 3) Fill name / phone / email and attach documents
# 4) POST multipart -> /api/submit
# Recharge services only collect details; nothing is sent to the backend.
#
# Run with:  streamlit run app.py

import streamlit as st

from client import (
    ACCEPTED_TYPES,
    CLIENT_MAX_FILE_SIZE,
    FormHouseClient,
    missing_fields,
    oversized_files,
)
from form_config import recharge_number_label

client = FormHouseClient()

st.set_page_config(page_title="FormHouse", page_icon="🏛️", layout="centered")
st.title("🏛️ FormHouse")
st.caption("Government services made simple: check the documents you need and upload them in one go.")

# ==============================
# BACKEND CHECK
# ==============================
if "backend" not in st.session_state:
    st.session_state["backend"] = client.health()

backend = st.session_state["backend"]
with st.sidebar:
    st.header("Backend")
    if backend:
        st.success(f"Connected (storage: {backend.get('storage')})")
    else:
        st.warning("Backend server not connected. Please start the server for file uploads.")
    if st.button("Re-check"):
        st.session_state["backend"] = client.health()
        st.session_state.pop("catalog", None)
        st.rerun()

# ==============================
# SERVICE PICKER
# ==============================
if "catalog" not in st.session_state:
    st.session_state["catalog"] = client.load_catalog()

catalog = st.session_state["catalog"]
labels = {key: f"{s['icon']} {s['name']}" for key, s in catalog.items()}
selected_key = st.selectbox("Choose a service", list(labels), format_func=labels.get)
service = catalog[selected_key]
recharge_options = service.get("rechargeOptions") or []

st.header(f"{service['icon']} {service['name']}")
st.write(service["description"])

# ==============================
# RECHARGE FORM
# ==============================
if recharge_options:
    icons = {o["name"]: o["icon"] for o in recharge_options}
    option = st.radio(
        "Recharge type",
        list(icons),
        format_func=lambda n: f"{icons[n]} {n}",
    )
    number_label = recharge_number_label(option)

    with st.form("recharge_form"):
        st.caption(f"Enter your details to proceed with {option}")
        number = st.text_input(f"{number_label} *")
        amount = st.number_input("Amount (₹) *", min_value=1, step=1, value=None)
        phone = st.text_input("Contact Number *")
        email = st.text_input("Email Address (optional)")
        submitted = st.form_submit_button(f"Proceed with {option}")

    if submitted:
        if missing_fields(number=number, phone=phone) or not amount:
            st.error("Please fill in all required fields")
        else:
            st.success(
                f"✅ {option} request received. We will contact you on {phone}. Amount: ₹{amount}"
            )
    st.stop()

# ==============================
# DOCUMENTS + UPLOAD FORM
# ==============================
st.subheader("📋 Required Documents")
for doc in service["documents"]:
    st.markdown(f"- {doc}")

with st.form("upload_form", clear_on_submit=False):
    name = st.text_input("Full Name *")
    phone = st.text_input("Phone Number *")
    email = st.text_input("Email Address *")
    uploaded = st.file_uploader(
        f"Upload documents (max {CLIENT_MAX_FILE_SIZE // (1024 * 1024)}MB each)",
        type=ACCEPTED_TYPES,
        accept_multiple_files=True,
    )
    submitted = st.form_submit_button("Submit Application")

if submitted:
    files = [(f.name, f.getvalue(), f.type or "application/octet-stream") for f in uploaded or []]
    too_big = oversized_files(files)

    if missing_fields(name=name, phone=phone, email=email):
        st.error("Please fill in all required fields")
    elif too_big:
        for fname in too_big:
            st.error(f'File "{fname}" is too large. Maximum size is 5MB.')
    else:
        with st.spinner("Uploading..."):
            result = client.submit(selected_key, name, phone, email, files)
        if result["ok"]:
            data = result["response"]["data"]
            st.balloons()
            st.success(
                f"✅ {service['name']} application submitted! {data['filesUploaded']} file(s) uploaded. "
                f"We will contact you on {phone}."
            )
        else:
            st.error(f"❌ {result['error']}")

# Footer
st.markdown("---")
st.caption("FormHouse")
