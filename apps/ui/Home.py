import asyncio
import mimetypes

import streamlit as st

from apps.ui.session import (
    bump_form_nonce,
    ensure_anonymous_session,
    get_draft,
    get_identity,
    release_gate,
    store_clients,
    take_banner,
    widget_key,
)
from core.logging import configure_logging
from domain.models import BOARDS, GENDERS, GRADES, RELATIONS
from domain.value_objects import PhotoUpload
from services.enrollment.workflow import SubmissionResult, submit_enrollment

configure_logging()

st.set_page_config(page_title="Student Enrollment", layout="centered")

PHOTO_TYPES = ["png", "jpg", "jpeg", "gif", "webp"]


def _photo(uploaded) -> PhotoUpload | None:
    if uploaded is None:
        return None
    ctype = uploaded.type or mimetypes.guess_type(uploaded.name)[0] or "image/jpeg"
    return PhotoUpload(filename=uploaded.name, content=uploaded.getvalue(), content_type=ctype)


async def _submit(draft, objects, documents) -> SubmissionResult:
    async with objects, documents:
        return await submit_enrollment(draft, objects, documents)


def _select(label: str, options: list[str], current: str, key: str, placeholder: str | None = None):
    choices = ([""] if placeholder else []) + options
    index = choices.index(current) if current in choices else 0
    return st.selectbox(
        label,
        choices,
        index=index,
        key=widget_key(key),
        format_func=lambda v: (placeholder if v == "" else v.title() if v.islower() else v),
    )


release_gate()
identity = get_identity()
ensure_anonymous_session(identity)
draft = get_draft()
form = draft.form

head, link = st.columns([4, 1])
head.title("Student Enrollment Form")
link.page_link("pages/1_admin.py", label="Admin")

# filled in after the submit button so only the current outcome shows
banner = st.empty()

st.subheader("Student Information")
form.student_name = st.text_input("Student Name *", value=form.student_name, key=widget_key("student_name"))
c1, c2 = st.columns(2)
form.date_of_birth = c1.text_input(
    "Date of Birth", value=form.date_of_birth, placeholder="YYYY-MM-DD", key=widget_key("dob")
)
with c2:
    form.gender = _select("Gender", GENDERS, form.gender, "gender", placeholder="Select gender")
draft.student_photo = _photo(
    st.file_uploader("Student Photo", type=PHOTO_TYPES, key=widget_key("student_photo"))
)

st.subheader("Academic Information")
form.school_name = st.text_input("School Name", value=form.school_name, key=widget_key("school"))
c1, c2 = st.columns(2)
with c1:
    form.grade = _select("Grade *", GRADES, form.grade, "grade")
with c2:
    form.board = _select("Board *", BOARDS, form.board, "board")
c1, c2 = st.columns(2)
form.branch = c1.text_input("Branch", value=form.branch, key=widget_key("branch"))
form.academic_year = c2.text_input(
    "Academic Year *", value=form.academic_year, key=widget_key("academic_year")
)

st.subheader("Address Details")
c1, c2 = st.columns(2)
form.area = c1.text_input("Area", value=form.area, key=widget_key("area"))
form.landmark = c2.text_input("Landmark", value=form.landmark, key=widget_key("landmark"))
c1, c2, c3 = st.columns(3)
form.city = c1.text_input("City", value=form.city, key=widget_key("city"))
form.state = c2.text_input("State", value=form.state, key=widget_key("state"))
form.pincode = c3.text_input("Pincode", value=form.pincode, key=widget_key("pincode"))

st.subheader("Contact Information")
for i, contact in enumerate(list(draft.contacts)):
    k = f"contact_{contact.uid}"
    with st.container(border=True):
        top, rm = st.columns([5, 1])
        top.markdown(f"**Contact {i + 1}**")
        if len(draft.contacts) > 1 and rm.button("Remove", key=widget_key(f"{k}_remove")):
            draft.remove_contact(i)
            st.rerun()
        c1, c2 = st.columns(2)
        contact.phone = c1.text_input("Phone *", value=contact.phone, key=widget_key(f"{k}_phone"))
        contact.contact_name = c2.text_input(
            "Contact Name *", value=contact.contact_name, key=widget_key(f"{k}_name")
        )
        contact.relation = _select(
            "Relation *", RELATIONS, contact.relation, f"{k}_relation", placeholder="Select relation"
        )
        if contact.relation:
            st.caption(f"Additional Information for {contact.relation.capitalize()}")
            c1, c2 = st.columns(2)
            contact.education_qualification = c1.text_input(
                "Education Qualification",
                value=contact.education_qualification,
                key=widget_key(f"{k}_edu"),
            )
            contact.name_of_organisation = c2.text_input(
                "Name of Organisation",
                value=contact.name_of_organisation,
                key=widget_key(f"{k}_org"),
            )
            contact.designation = c1.text_input(
                "Designation", value=contact.designation, key=widget_key(f"{k}_designation")
            )
            contact.department = c2.text_input(
                "Department", value=contact.department, key=widget_key(f"{k}_department")
            )
            contact.photo = _photo(
                st.file_uploader(
                    f"{contact.relation.capitalize()}'s Photo",
                    type=PHOTO_TYPES,
                    key=widget_key(f"{k}_photo"),
                )
            )
        else:
            contact.photo = None

if st.button("Add Another Contact", key=widget_key("add_contact")):
    draft.add_contact()
    st.rerun()

if st.button("Submit Enrollment", type="primary", key=widget_key("submit")):
    st.session_state.pop("submit_error", None)
    objects, documents = store_clients(identity)
    with st.spinner("Submitting..."):
        result = asyncio.run(_submit(draft, objects, documents))
    if result.ok:
        st.session_state.flash = result.message
        bump_form_nonce()
        st.rerun()
    st.session_state.submit_error = result.message

if status := take_banner(st.session_state):
    kind, text = status
    (banner.success if kind == "success" else banner.error)(text)
