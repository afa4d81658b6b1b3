from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import date


class AttendanceEntryIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    studentId: str
    # Status is validated by the engine so a bad value is reported against its entry
    status: str
    hoursAttended: Optional[float] = None
    hoursRequired: Optional[float] = None
    notes: Optional[str] = None


class RecordDayRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: date
    attendanceType: Literal["classroom", "clinical"]
    entries: List[AttendanceEntryIn] = Field(default_factory=list)
