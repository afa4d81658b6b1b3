from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class AttendanceType(str, Enum):
    CLASSROOM = "classroom"
    CLINICAL = "clinical"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    TARDY = "Tardy"
    EXCUSED = "Excused"
    PARTIAL = "Partial"


class LogStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class MakeupStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ComplianceThresholds:
    """
    Regulatory thresholds the classifier and recorder evaluate against.

    Defaults come from config/constants.json (see utils.constants); pass a
    custom instance to the engine to evaluate under a different governing body.
    """

    required_total_hours: float = 400
    """Direct-care clinical hours required for completion."""
    simulation_cap_hours: float = 100
    """Absolute ceiling on simulation hours."""
    simulation_cap_percent: float = 25
    """Ceiling on simulation hours as a percentage of total hours."""
    simulation_warning_hours: float = 80
    """Simulation hours at which the student enters the warning band."""
    at_risk_hours_threshold: float = 300
    """Total hours below which a student is flagged at risk."""
    behind_hours_threshold: float = 200
    """Total hours below which a student is considered behind."""
    near_completion_progress: float = 0.90
    """Fraction of required hours at which a student is near completion."""
    default_clinical_shift_hours: float = 8
    """Hours required for a clinical attendance day when none is given."""
    default_classroom_shift_hours: float = 4
    """Hours required for a classroom attendance day when none is given."""
    makeup_due_days: int = 30
    """Days after the missed date by which a makeup obligation is due."""

    def default_shift_hours(self, attendance_type: AttendanceType) -> float:
        if attendance_type == AttendanceType.CLINICAL:
            return self.default_clinical_shift_hours
        return self.default_classroom_shift_hours


@dataclass
class Student:
    id: str
    first_name: str = ""
    last_name: str = ""
    cohort: str = ""
    clinical_hours_required: Optional[float] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class ClinicalLogEntry:
    """One clinical day logged for one student."""

    id: str
    student_id: str
    date: date
    site_name: str
    hours: float
    is_simulation: bool = False
    is_makeup: bool = False
    status: LogStatus = LogStatus.PENDING


def attendance_id(student_id: str, day: date, attendance_type: AttendanceType) -> str:
    """Deterministic id so re-saving the same day replaces the prior record."""
    return f"ATT-{student_id}-{day.isoformat()}-{AttendanceType(attendance_type).value}"


@dataclass
class AttendanceRecord:
    """One attendance outcome for one student, one day, one attendance type."""

    id: str
    student_id: str
    date: date
    attendance_type: AttendanceType
    status: AttendanceStatus
    hours_required: float
    hours_attended: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None


@dataclass
class MakeupHoursRecord:
    """
    An obligation to recover missed clinical time.

    `status` is computed from the hour balance and cannot be assigned.
    `version` is bumped by the store on every write and is the token for
    compare-and-set updates.
    """

    id: str
    student_id: str
    hours_owed: float
    hours_completed: float = 0.0
    original_absence_id: Optional[str] = None
    reason: Optional[str] = None
    due_date: Optional[date] = None
    completion_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    def __post_init__(self):
        if self.hours_owed <= 0:
            raise ValueError(f"hours_owed must be positive, got {self.hours_owed}")
        if not 0 <= self.hours_completed <= self.hours_owed:
            raise ValueError(
                f"hours_completed must be within [0, {self.hours_owed}], "
                f"got {self.hours_completed}"
            )

    @property
    def status(self) -> MakeupStatus:
        if self.hours_completed >= self.hours_owed:
            return MakeupStatus.COMPLETED
        if self.hours_completed > 0:
            return MakeupStatus.IN_PROGRESS
        return MakeupStatus.PENDING

    @property
    def balance(self) -> float:
        return self.hours_owed - self.hours_completed


@dataclass
class SiteHours:
    site_name: str
    total_hours: float = 0.0
    direct_hours: float = 0.0
    sim_hours: float = 0.0
    is_makeup: bool = False


@dataclass
class HoursBreakdown:
    """Output of the hour aggregator, before any threshold is applied."""

    total_hours: float = 0.0
    direct_hours: float = 0.0
    sim_hours: float = 0.0
    makeup_hours: float = 0.0
    sim_percentage: int = 0
    hours_by_site: List[SiteHours] = field(default_factory=list)
    skipped_entry_ids: List[str] = field(default_factory=list)


@dataclass
class StudentFlag:
    type: str
    severity: str
    message: str
    details: Optional[str] = None


@dataclass
class ComplianceStatus:
    sim_status: str
    alert_level: str
    is_compliant: bool
    progress: float
    progress_status: str
    is_at_risk: bool
    flags: List[StudentFlag] = field(default_factory=list)


@dataclass
class StudentHoursSummary:
    student_id: str
    total_hours: float
    direct_hours: float
    sim_hours: float
    makeup_hours: float
    sim_percentage: int
    is_compliant: bool
    hours_by_site: List[SiteHours]
    sim_status: str
    alert_level: str
    progress: float
    progress_status: str
    is_at_risk: bool
    flags: List[StudentFlag] = field(default_factory=list)
    skipped_entry_ids: List[str] = field(default_factory=list)


@dataclass
class MakeupHoursSummary:
    student_id: str
    total_hours_owed: float
    total_hours_completed: float
    balance_remaining: float
    records: List[MakeupHoursRecord] = field(default_factory=list)


@dataclass
class AttendanceSummary:
    student_id: str
    total_present: int = 0
    total_absences: int = 0
    total_tardies: int = 0
    total_excused: int = 0
    total_partial: int = 0
    classroom_absences: int = 0
    classroom_tardies: int = 0
    clinical_absences: int = 0
    clinical_tardies: int = 0


@dataclass
class AttendanceDayResult:
    saved: List[AttendanceRecord]
    derived_obligations: List[MakeupHoursRecord]
    removed_obligation_ids: List[str] = field(default_factory=list)
