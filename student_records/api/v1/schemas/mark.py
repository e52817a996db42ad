from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, constr


class MarkCreate(BaseModel):
    subject: constr(strip_whitespace=True, min_length=1)
    marks: StrictInt
    term: Optional[constr(strip_whitespace=True)] = None


class MarkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str
    marks: Optional[int] = None
    term: Optional[str] = None
