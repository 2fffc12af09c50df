"""
In-memory, not-yet-persisted enrollment form state.

The UI mutates these objects directly; the submission workflow reads them,
turns them into an ``EnrollmentCreate`` payload and resets them on success.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields

from domain.models import (
    DEFAULT_ACADEMIC_YEAR,
    DEFAULT_BOARD,
    DEFAULT_GRADE,
    ContactRecord,
    blank_to_none,
)
from domain.value_objects import PhotoRef, PhotoUpload

CONDITIONAL_CONTACT_FIELDS = (
    "education_qualification",
    "name_of_organisation",
    "designation",
    "department",
)


@dataclass
class StudentForm:
    student_name: str = ""
    school_name: str = ""
    grade: str = DEFAULT_GRADE
    board: str = DEFAULT_BOARD
    branch: str = ""
    academic_year: str = DEFAULT_ACADEMIC_YEAR
    area: str = ""
    landmark: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    date_of_birth: str = ""
    gender: str = ""

    def as_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ContactDraft:
    phone: str = ""
    contact_name: str = ""
    relation: str = ""
    education_qualification: str = ""
    name_of_organisation: str = ""
    designation: str = ""
    department: str = ""
    # transient file handle; never sent to the document store
    photo: PhotoUpload | None = None
    # stable widget identity across add/remove
    uid: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False)

    @property
    def photo_name(self) -> str | None:
        return self.photo.filename if self.photo else None

    def to_record(self, photo: PhotoRef) -> ContactRecord:
        # blank conditional fields are stored absent, never as ""
        conditional = {
            name: blank_to_none(getattr(self, name)) for name in CONDITIONAL_CONTACT_FIELDS
        }
        return ContactRecord(
            phone=self.phone,
            contact_name=self.contact_name,
            relation=self.relation,
            photo_url=photo.url,
            photo_name=photo.name,
            **conditional,
        )


@dataclass
class EnrollmentDraft:
    form: StudentForm = field(default_factory=StudentForm)
    student_photo: PhotoUpload | None = None
    contacts: list[ContactDraft] = field(default_factory=lambda: [ContactDraft()])

    def add_contact(self) -> ContactDraft:
        contact = ContactDraft()
        self.contacts.append(contact)
        return contact

    def remove_contact(self, index: int) -> None:
        # at least one contact entry always remains
        if len(self.contacts) > 1:
            del self.contacts[index]

    def missing_fields(self) -> list[str]:
        missing = [
            name
            for name in ("student_name", "grade", "board", "academic_year")
            if not getattr(self.form, name).strip()
        ]
        if not self.contacts:
            missing.append("contacts")
        for i, c in enumerate(self.contacts, start=1):
            for name in ("phone", "contact_name", "relation"):
                if not getattr(c, name).strip():
                    missing.append(f"contacts[{i}].{name}")
        return missing

    def reset(self) -> None:
        self.form = StudentForm()
        self.student_photo = None
        self.contacts = [ContactDraft()]
