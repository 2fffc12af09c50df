import asyncio

import streamlit as st

from apps.ui.session import get_gate, get_identity
from core.logging import configure_logging
from services.clients.stores import DocumentStoreClient
from services.enrollment.listing import (
    EnrollmentListing,
    contact_photo_filename,
    download_photo,
    format_submitted,
    student_photo_filename,
)

configure_logging()

st.set_page_config(page_title="Admin Dashboard", layout="wide")

fetch_photo = st.cache_data(show_spinner=False)(download_photo)


def _login_form(gate) -> None:
    _, mid, _ = st.columns([1, 2, 1])
    with mid, st.form("admin_login"):
        st.subheader("Admin Login")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Login", use_container_width=True):
            with st.spinner("Logging in..."):
                error = gate.login(email, password)
            if error:
                st.error(error)
            else:
                st.rerun()


def _photo_block(url: str, filename: str, key: str, caption: str) -> None:
    st.image(url, caption=caption, width=160)
    # bytes are fetched only once the reviewer asks for them
    if st.button("Download photo", key=f"fetch_{key}"):
        data = fetch_photo(url)
        st.download_button("Save photo", data, file_name=filename, mime="image/jpeg", key=key)


def _detail(record) -> None:
    st.subheader("Enrollment Details")
    left, right = st.columns([3, 1])
    with left:
        st.markdown(f"### {record.student_name}")
        st.write(f"**Date of Birth:** {record.date_of_birth or 'N/A'}")
        st.write(f"**Gender:** {(record.gender or 'N/A').capitalize()}")
        st.write(f"**School:** {record.school_name or 'N/A'}")
        st.write(f"**Grade / Board:** {record.grade} / {record.board}")
        st.write(f"**Branch:** {record.branch or 'N/A'}")
        st.write(f"**Academic Year:** {record.academic_year}")
        address = ", ".join(p for p in (record.area, record.landmark, record.city, record.state) if p)
        if record.pincode:
            address = f"{address} - {record.pincode}" if address else record.pincode
        st.write(f"**Address:** {address or 'N/A'}")
        st.write(f"**Submitted:** {format_submitted(record.created_at)}")
    with right:
        if record.student_photo_url:
            _photo_block(
                record.student_photo_url,
                student_photo_filename(record),
                f"dl_student_{record.id}",
                "Student",
            )

    st.markdown("#### Contacts")
    for i, contact in enumerate(record.contacts):
        with st.container(border=True):
            info, photo = st.columns([3, 1])
            with info:
                st.markdown(f"**{contact.contact_name}** ({contact.relation.capitalize()})")
                st.write(f"Phone: {contact.phone}")
                for label, value in (
                    ("Education", contact.education_qualification),
                    ("Organisation", contact.name_of_organisation),
                    ("Designation", contact.designation),
                    ("Department", contact.department),
                ):
                    if value:
                        st.write(f"{label}: {value}")
            with photo:
                if contact.photo_url:
                    _photo_block(
                        contact.photo_url,
                        contact_photo_filename(contact.contact_name, contact.relation),
                        f"dl_contact_{record.id}_{i}",
                        f"{contact.relation.capitalize()}'s photo",
                    )


identity = get_identity()
gate = get_gate(identity)
gate.recheck()

if not gate.can_render_dashboard:
    st.session_state.pop("listing", None)
    _login_form(gate)
    st.stop()

# first render as admin mounts the dashboard: exactly one bulk read
if "listing" not in st.session_state:
    st.session_state.listing = EnrollmentListing(DocumentStoreClient(identity.auth_headers))
listing: EnrollmentListing = st.session_state.listing
with st.spinner("Loading enrollments..."):
    asyncio.run(listing.load())

title, logout = st.columns([5, 1])
title.title("Enrollment Dashboard")
if logout.button("Logout"):
    gate.logout()
    st.session_state.pop("listing", None)
    st.switch_page("Home.py")

if listing.error:
    st.error(listing.error)

if not listing.records:
    st.info("No enrollments found.")
    st.stop()

master, detail = st.columns([1, 2])
with master:
    st.markdown(f"**Enrollments** · Total: {listing.total}")
    for rec in listing.records:
        label = f"{rec.student_name} · {rec.grade} • {rec.board}\n\nSubmitted: {format_submitted(rec.created_at)}"
        kind = "primary" if rec.id == listing.selected_id else "secondary"
        if st.button(label, key=f"sel_{rec.id}", type=kind, use_container_width=True):
            listing.select(rec.id)
            st.rerun()

with detail:
    if listing.selected:
        _detail(listing.selected)
    else:
        st.info("Select an enrollment to view details")
