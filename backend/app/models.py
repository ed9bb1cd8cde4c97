"""SQLModel data models.

The service owns a single table of student registrations. The table is
named `users` because that is the name the deployed database and the
`/api/users` endpoints have always used.
"""

from typing import Optional
from sqlmodel import SQLModel, Field


class Student(SQLModel, table=True):
    """A registered student.

    Fields:
    - `id`: assigned by the database on insert, never changed afterwards
    - `name`: display name as typed into the registration form
    - `email`, `course`: optional registration details, stored verbatim
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    email: Optional[str] = Field(default=None, max_length=255)
    course: Optional[str] = Field(default=None, max_length=255)
