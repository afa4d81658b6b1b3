from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional
from datetime import date
import uuid


class ClinicalLogIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: f"LOG-{uuid.uuid4()}")
    date: date
    siteName: str
    hours: float
    isSimulation: bool = False
    isMakeup: bool = False
    status: Literal["Pending", "Approved", "Rejected"] = "Pending"
