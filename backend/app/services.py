"""Business logic used by HTTP controllers.

There is very little of it: registration is a pass-through to the
repository. The service exists so controllers never touch SQLModel
objects directly and so tests can swap the repository out.
"""

from typing import List
from sqlmodel import Session
from . import models, repositories
from .schemas import StudentIn


class RegistrationService:
    """Register students and list existing registrations."""
    def __init__(self, session: Session):
        self.session = session
        self.student_repo = repositories.StudentRepository(session)

    def register(self, payload: StudentIn) -> models.Student:
        """Persist a new student built from `payload`.

        No duplicate detection: registering the same payload twice
        creates two rows with distinct ids.
        """
        student = models.Student(**payload.model_dump())
        return self.student_repo.create(student)

    def list_students(self) -> List[models.Student]:
        return self.student_repo.list_all()
