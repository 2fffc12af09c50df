from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

GRADES = ["Playschool", "Nursery", "Jr. KG", "Sr. KG"] + [str(i) for i in range(1, 16)]
BOARDS = ["IGCSE", "AS/A Levels", "IBDP", "IB", "CBSE", "ICSE", "State Board", "NIOS", "Others"]
GENDERS = ["male", "female", "other"]
RELATIONS = ["parent", "guardian", "other"]

DEFAULT_GRADE = "Playschool"
DEFAULT_BOARD = "IGCSE"
DEFAULT_ACADEMIC_YEAR = "2024-2025"

ENROLLMENTS_COLLECTION = "enrollments"


class PhotoCategory(str, Enum):
    STUDENT = "student"
    CONTACT = "contact"


def blank_to_none(value):
    """Collapse empty/whitespace strings into the canonical absent value."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class ContactRecord(BaseModel):
    phone: str = Field(min_length=1)
    contact_name: str = Field(min_length=1)
    relation: str = Field(min_length=1)
    education_qualification: Optional[str] = None
    name_of_organisation: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    photo_url: Optional[str] = None
    photo_name: Optional[str] = None

    @field_validator("phone", "contact_name", "relation", mode="before")
    @classmethod
    def _strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "education_qualification",
        "name_of_organisation",
        "designation",
        "department",
        "photo_url",
        "photo_name",
        mode="before",
    )
    @classmethod
    def _blank_optional(cls, v):
        return blank_to_none(v)


class EnrollmentCreate(BaseModel):
    """Write payload; identity and timestamps are assigned by the store."""

    student_name: str = Field(min_length=1)
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    school_name: Optional[str] = None
    grade: str = Field(default=DEFAULT_GRADE, min_length=1)
    board: str = Field(default=DEFAULT_BOARD, min_length=1)
    branch: Optional[str] = None
    academic_year: str = Field(default=DEFAULT_ACADEMIC_YEAR, min_length=1)
    area: Optional[str] = None
    landmark: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    student_photo_url: Optional[str] = None
    student_photo_name: Optional[str] = None
    contacts: List[ContactRecord] = Field(min_length=1)

    @field_validator("student_name", "grade", "board", "academic_year", mode="before")
    @classmethod
    def _strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "date_of_birth",
        "gender",
        "school_name",
        "branch",
        "area",
        "landmark",
        "city",
        "state",
        "pincode",
        "student_photo_url",
        "student_photo_name",
        mode="before",
    )
    @classmethod
    def _blank_optional(cls, v):
        return blank_to_none(v)


class EnrollmentRecord(EnrollmentCreate):
    id: str
    # stored documents written before timestamps resolved may lack them
    contacts: List[ContactRecord] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EnrollmentCreated(BaseModel):
    id: str


class Identity(BaseModel):
    uid: str
    email: Optional[str] = None
    is_anonymous: bool = False


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class StoredBlob(BaseModel):
    key: str
    url: str
