"""
Record types and typed extractors shared by every engine.

Records are frozen dataclasses; engines read them through two closed
enumerations instead of looking attributes up by string:

- ``Field``: readable attributes (string, number or date), including nested
  paths such as ``address.city``. Used by sorting and searching.
- ``Feature``: numeric extractors, including derived values such as the
  attendance rate. Used by clustering, correlation and prediction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

FieldValue = Union[str, float, int, date, datetime, None]

GRADE_POINTS: Dict[str, float] = {
    "A+": 4.0, "A": 4.0, "A-": 3.7,
    "B+": 3.3, "B": 3.0, "B-": 2.7,
    "C+": 2.3, "C": 2.0, "C-": 1.7,
    "D+": 1.3, "D": 1.0, "F": 0.0,
}


@dataclass(frozen=True)
class Address:
    """Postal address of a student."""

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


@dataclass(frozen=True)
class CourseGrade:
    """Grade obtained in one course."""

    course_id: str
    course_name: str
    grade: str
    credits: float
    instructor: str = ""


@dataclass(frozen=True)
class AcademicRecord:
    """One semester of academic history."""

    semester: int
    year: int
    courses: Tuple[CourseGrade, ...] = ()
    gpa: float = 0.0
    credits: float = 0.0


@dataclass(frozen=True)
class Achievement:
    """An academic or extracurricular achievement."""

    id: str
    title: str
    date: date
    category: str = "other"
    description: str = ""


@dataclass(frozen=True)
class AttendanceRecord:
    """Attendance for one course session."""

    date: date
    course_id: str
    status: str  # "present", "absent" or "late"


@dataclass(frozen=True)
class Student:
    """
    A student record.

    Attributes:
        id: Unique identifier
        first_name / last_name / email / roll_no: Searchable identity fields
        course / department: Enrollment information
        year / semester / gpa / credits: Academic standing
        enrollment_date: Date the student enrolled
        academic_history / achievements / attendance: Ordered sub-records
    """

    id: str
    first_name: str
    last_name: str
    email: str = ""
    roll_no: str = ""
    contact: str = ""
    date_of_birth: Optional[date] = None
    gender: str = "other"
    address: Address = field(default_factory=Address)
    course: str = ""
    department: str = ""
    year: int = 0
    semester: int = 0
    gpa: float = 0.0
    credits: float = 0.0
    enrollment_date: Optional[date] = None
    status: str = "active"
    academic_history: Tuple[AcademicRecord, ...] = ()
    achievements: Tuple[Achievement, ...] = ()
    attendance: Tuple[AttendanceRecord, ...] = ()
    extracurriculars: Tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Course:
    """A course with the ids of the courses it requires."""

    id: str
    name: str
    prerequisites: Tuple[str, ...] = ()


# ------------------------------------------------------------------
# Derived values
# ------------------------------------------------------------------

def grade_to_points(grade: str) -> float:
    """Convert a letter grade to grade points (unknown grades count as 0)."""
    return GRADE_POINTS.get(grade, 0.0)


def attendance_rate(student: Student) -> float:
    """Fraction of attendance entries marked present (0 with no entries)."""
    if not student.attendance:
        return 0.0
    present = sum(1 for a in student.attendance if a.status == "present")
    return present / len(student.attendance)


def average_grade(student: Student) -> float:
    """Credit-weighted grade-point average across the academic history."""
    total_points = 0.0
    total_credits = 0.0
    for record in student.academic_history:
        for course in record.courses:
            total_points += grade_to_points(course.grade) * course.credits
            total_credits += course.credits
    return total_points / total_credits if total_credits > 0 else 0.0


def to_timestamp(value: Union[date, datetime, None]) -> float:
    """Seconds since the epoch for a date or datetime (UTC for naive values)."""
    if value is None:
        return 0.0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    return datetime.combine(value, time.min, tzinfo=timezone.utc).timestamp()


# ------------------------------------------------------------------
# Field extractors
# ------------------------------------------------------------------

class Field(str, Enum):
    """Readable record attributes, addressed by their dotted path."""

    ID = "id"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    ROLL_NO = "roll_no"
    CONTACT = "contact"
    GENDER = "gender"
    COURSE = "course"
    DEPARTMENT = "department"
    STATUS = "status"
    YEAR = "year"
    SEMESTER = "semester"
    GPA = "gpa"
    CREDITS = "credits"
    DATE_OF_BIRTH = "date_of_birth"
    ENROLLMENT_DATE = "enrollment_date"
    CITY = "address.city"
    STATE = "address.state"
    COUNTRY = "address.country"

    def read(self, student: Student) -> FieldValue:
        """Read this field from *student*."""
        return _FIELD_READERS[self](student)


_FIELD_READERS: Dict[Field, Callable[[Student], FieldValue]] = {
    Field.ID: lambda s: s.id,
    Field.FIRST_NAME: lambda s: s.first_name,
    Field.LAST_NAME: lambda s: s.last_name,
    Field.EMAIL: lambda s: s.email,
    Field.ROLL_NO: lambda s: s.roll_no,
    Field.CONTACT: lambda s: s.contact,
    Field.GENDER: lambda s: s.gender,
    Field.COURSE: lambda s: s.course,
    Field.DEPARTMENT: lambda s: s.department,
    Field.STATUS: lambda s: s.status,
    Field.YEAR: lambda s: s.year,
    Field.SEMESTER: lambda s: s.semester,
    Field.GPA: lambda s: s.gpa,
    Field.CREDITS: lambda s: s.credits,
    Field.DATE_OF_BIRTH: lambda s: s.date_of_birth,
    Field.ENROLLMENT_DATE: lambda s: s.enrollment_date,
    Field.CITY: lambda s: s.address.city,
    Field.STATE: lambda s: s.address.state,
    Field.COUNTRY: lambda s: s.address.country,
}


def field_text(student: Student, fields: Iterable[Field]) -> str:
    """Space-joined string form of *fields*, skipping missing values."""
    parts = []
    for f in fields:
        value = f.read(student)
        if value is None:
            continue
        parts.append(value.isoformat() if isinstance(value, (date, datetime)) else str(value))
    return " ".join(parts)


# ------------------------------------------------------------------
# Feature extractors
# ------------------------------------------------------------------

class Feature(str, Enum):
    """Numeric extractors that turn a record into one vector component."""

    YEAR = "year"
    SEMESTER = "semester"
    CREDITS = "credits"
    GPA = "gpa"
    ATTENDANCE_COUNT = "attendance_count"
    ACADEMIC_HISTORY_COUNT = "academic_history_count"
    ACHIEVEMENT_COUNT = "achievement_count"
    ATTENDANCE_RATE = "attendance_rate"
    AVERAGE_GRADE = "average_grade"
    ENROLLMENT_TIMESTAMP = "enrollment_timestamp"

    @property
    def label(self) -> str:
        """Human-readable name used in ranked factor lists."""
        return _FEATURE_LABELS[self]

    def extract(self, student: Student) -> float:
        """Numeric value of this feature for *student*."""
        return float(_FEATURE_EXTRACTORS[self](student))


_FEATURE_EXTRACTORS: Dict[Feature, Callable[[Student], float]] = {
    Feature.YEAR: lambda s: s.year or 0,
    Feature.SEMESTER: lambda s: s.semester or 0,
    Feature.CREDITS: lambda s: s.credits or 0,
    Feature.GPA: lambda s: s.gpa or 0,
    Feature.ATTENDANCE_COUNT: lambda s: len(s.attendance),
    Feature.ACADEMIC_HISTORY_COUNT: lambda s: len(s.academic_history),
    Feature.ACHIEVEMENT_COUNT: lambda s: len(s.achievements),
    Feature.ATTENDANCE_RATE: attendance_rate,
    Feature.AVERAGE_GRADE: average_grade,
    Feature.ENROLLMENT_TIMESTAMP: lambda s: to_timestamp(s.enrollment_date),
}

_FEATURE_LABELS: Dict[Feature, str] = {
    Feature.YEAR: "Year",
    Feature.SEMESTER: "Semester",
    Feature.CREDITS: "Credits",
    Feature.GPA: "GPA",
    Feature.ATTENDANCE_COUNT: "Attendance Count",
    Feature.ACADEMIC_HISTORY_COUNT: "Academic History",
    Feature.ACHIEVEMENT_COUNT: "Achievements",
    Feature.ATTENDANCE_RATE: "Attendance Rate",
    Feature.AVERAGE_GRADE: "Average Grade",
    Feature.ENROLLMENT_TIMESTAMP: "Enrollment Date",
}

# Feature set used by the prediction engine, in column order.
DEFAULT_PREDICTION_FEATURES: Tuple[Feature, ...] = (
    Feature.YEAR,
    Feature.SEMESTER,
    Feature.CREDITS,
    Feature.ATTENDANCE_COUNT,
    Feature.ACADEMIC_HISTORY_COUNT,
    Feature.ACHIEVEMENT_COUNT,
    Feature.ATTENDANCE_RATE,
    Feature.AVERAGE_GRADE,
)


def feature_vector(student: Student, features: Sequence[Feature]) -> np.ndarray:
    """Extract a single feature vector in the order of *features*."""
    return np.array([f.extract(student) for f in features], dtype=np.float64)


def feature_matrix(
    students: Sequence[Student], features: Sequence[Feature]
) -> np.ndarray:
    """
    Build an ``(n_records, n_features)`` matrix.

    Every row uses the same extractor order, so all rows share length and
    dimension order. An empty record list gives shape ``(0, n_features)``.
    """
    if len(features) == 0:
        raise ValueError("At least one feature is required")
    rows: List[np.ndarray] = [feature_vector(s, features) for s in students]
    if not rows:
        return np.zeros((0, len(features)), dtype=np.float64)
    return np.vstack(rows)


def feature_labels(features: Sequence[Feature]) -> List[str]:
    return [f.label for f in features]
