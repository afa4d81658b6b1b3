class ValidationError(Exception):
    """Raised when an attendance entry or hour amount is malformed. The whole batch is rejected before any write."""

    def __init__(self, message, index=None, student_id=None):
        super().__init__(message)
        self.index = index
        self.student_id = student_id

    @property
    def context(self):
        return {"index": self.index, "studentId": self.student_id}


class BalanceError(Exception):
    """Raised when logged makeup hours exceed the remaining balance of an obligation."""

    def __init__(self, message, record_id, remaining):
        super().__init__(message)
        self.record_id = record_id
        self.remaining = remaining

    @property
    def context(self):
        return {"recordId": self.record_id, "remaining": self.remaining}


class NotFoundError(Exception):
    """Raised when an operation refers to an unknown student or record."""

    def __init__(self, message, kind=None, key=None):
        super().__init__(message)
        self.kind = kind
        self.key = key

    @property
    def context(self):
        return {"kind": self.kind, "id": self.key}


class DuplicateRecordError(Exception):
    """Raised when a record is inserted under an id that is already taken."""

    def __init__(self, message, kind=None, key=None):
        super().__init__(message)
        self.kind = kind
        self.key = key

    @property
    def context(self):
        return {"kind": self.kind, "id": self.key}


class ConcurrentUpdateError(Exception):
    """Raised when a makeup record changed between read and write (compare-and-set lost)."""

    def __init__(self, message, record_id, expected_version, actual_version):
        super().__init__(message)
        self.record_id = record_id
        self.expected_version = expected_version
        self.actual_version = actual_version

    @property
    def context(self):
        return {
            "recordId": self.record_id,
            "expectedVersion": self.expected_version,
            "actualVersion": self.actual_version,
        }


# Mapping of custom exceptions to HTTP status codes
CUSTOM_ERRORS = {
    ValidationError: 400,
    BalanceError: 400,
    NotFoundError: 404,
    DuplicateRecordError: 409,
    ConcurrentUpdateError: 409,
}
