"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable independently of the table
model. Only types are checked; field contents are stored as given.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class StudentIn(BaseModel):
    """Registration payload. Any client-supplied `id` is ignored."""
    name: str
    email: Optional[str] = None
    course: Optional[str] = None


class StudentOut(StudentIn):
    """A persisted student including its database-assigned id."""
    model_config = ConfigDict(from_attributes=True)

    id: int
