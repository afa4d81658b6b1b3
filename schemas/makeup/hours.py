from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date


class LogHoursRequest(BaseModel):
    hours: float  # Hours completed in this session


class AddMakeupRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    studentId: str
    hoursOwed: float
    reason: Optional[str] = None
    dueDate: Optional[date] = None
    notes: Optional[str] = None
