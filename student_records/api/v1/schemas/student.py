from datetime import datetime, timezone
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, constr, field_validator

from student_records.api.v1.schemas.common import PaginationMeta
from student_records.api.v1.schemas.mark import MarkCreate, MarkResponse


class CreateNewStudent(BaseModel):
    first_name: constr(strip_whitespace=True, min_length=1)
    last_name: Optional[str] = None
    email: constr(strip_whitespace=True, min_length=1)
    dob: Optional[str] = None
    marks: Optional[List[MarkCreate]] = None


class UpdateStudent(BaseModel):
    first_name: constr(strip_whitespace=True, min_length=1)
    last_name: Optional[str] = None
    email: constr(strip_whitespace=True, min_length=1)
    dob: Optional[str] = None


class StudentListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: Optional[str] = None
    email: str
    dob: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("dob", "created_at", "updated_at", check_fields=False)
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands timestamps back without tzinfo; they are stored as UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class StudentResponse(StudentListItem):
    updated_at: Optional[datetime] = None


class StudentDetail(StudentResponse):
    marks: List[MarkResponse] = []


class StudentEnvelope(BaseModel):
    success: bool = True
    student: StudentResponse


class StudentDetailEnvelope(BaseModel):
    success: bool = True
    student: StudentDetail


class StudentListEnvelope(BaseModel):
    success: bool = True
    meta: PaginationMeta
    data: List[StudentListItem]
