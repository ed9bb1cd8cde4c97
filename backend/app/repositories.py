"""Repository classes encapsulating database operations.

`StudentRepository` is the only repository: it returns SQLModel objects
and commits/refreshes where appropriate.
"""

from typing import List
from sqlmodel import Session, select
from . import models


class StudentRepository:
    """Insert and list operations for `Student` rows."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, student: models.Student) -> models.Student:
        """Insert a new student and return it with its assigned id."""
        self.session.add(student)
        self.session.commit()
        self.session.refresh(student)
        return student

    def list_all(self) -> List[models.Student]:
        """Return every student in the database's default scan order."""
        return list(self.session.exec(select(models.Student)).all())
