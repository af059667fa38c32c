"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

from datetime import date

import pytest

from nexus_algorithms.records import (
    AcademicRecord,
    Achievement,
    Address,
    AttendanceRecord,
    Course,
    CourseGrade,
    Student,
)


def make_student(student_id: str, first: str, last: str, **kwargs) -> Student:
    """Build a Student with sensible defaults for everything not given."""
    defaults = dict(
        email=f"{first.lower()}.{last.lower()}@example.edu",
        roll_no=f"R{student_id.zfill(4)}",
        department="Computer Science",
        course="B.Tech",
        year=1,
        semester=1,
        gpa=3.0,
        credits=30,
        enrollment_date=date(2022, 8, 1),
    )
    defaults.update(kwargs)
    return Student(id=student_id, first_name=first, last_name=last, **defaults)


@pytest.fixture
def student_factory():
    """Factory fixture wrapping ``make_student``."""
    return make_student


@pytest.fixture
def students():
    """
    A small, varied set of student records.

    Covers several departments, years and GPAs, plus one record with
    academic history, achievements and attendance.
    """
    history = (
        AcademicRecord(
            semester=1,
            year=2022,
            courses=(
                CourseGrade("CS101", "Programming", "A", 4),
                CourseGrade("MA101", "Calculus", "B", 2),
            ),
            gpa=3.67,
            credits=6,
        ),
    )
    attendance = (
        AttendanceRecord(date(2023, 1, 9), "CS101", "present"),
        AttendanceRecord(date(2023, 1, 10), "CS101", "present"),
        AttendanceRecord(date(2023, 1, 11), "CS101", "absent"),
        AttendanceRecord(date(2023, 1, 12), "CS101", "late"),
    )
    return [
        make_student(
            "1", "Alice", "Johnson",
            year=2, semester=3, gpa=3.8, credits=60,
            address=Address(city="Boston", state="MA", country="USA"),
            academic_history=history,
            achievements=(Achievement("a1", "Dean's List", date(2023, 5, 1), "academic"),),
            attendance=attendance,
        ),
        make_student("2", "Bob", "Smith", department="Mathematics", course="B.Sc",
                     year=1, semester=1, gpa=2.9, credits=30),
        make_student("3", "Carol", "Williams", department="Physics", course="B.Sc",
                     year=3, semester=5, gpa=3.5, credits=90),
        make_student("4", "David", "Brown", year=4, semester=7, gpa=3.1, credits=120),
        make_student("5", "Alicia", "Jones", department="Mathematics", course="M.Sc",
                     year=2, semester=4, gpa=3.9, credits=64),
        make_student("6", "Ethan", "Smithers", department="Electrical Engineering",
                     year=1, semester=2, gpa=2.4, credits=28),
    ]


@pytest.fixture
def courses():
    """Courses with a valid (acyclic) prerequisite graph."""
    return [
        Course("CS301", "Algorithms", ("CS201", "MA201")),
        Course("CS101", "Programming I"),
        Course("CS201", "Data Structures", ("CS101",)),
        Course("MA101", "Calculus I"),
        Course("MA201", "Discrete Math", ("MA101",)),
    ]
