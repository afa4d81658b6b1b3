record_day_description = """
Record one day's attendance for a cohort and derive makeup-hour obligations.

Re-submitting the same day and attendance type replaces the earlier records, so
the endpoint can be called again to correct a mistake.

### Request Body

-   `date`: Day the attendance was taken (YYYY-MM-DD)
-   `attendanceType`: `classroom` or `clinical`
-   `entries`: List of attendance entries, each containing:
    -   `studentId`: Primary key of the student
    -   `status`: One of `Present`, `Absent`, `Tardy`, `Excused`, `Partial`
    -   `hoursAttended`: Hours attended. Required for `Partial`, not allowed otherwise
    -   `hoursRequired`: Hours required for the day (Optional, defaults to 8 for clinical and 4 for classroom,
        or to the value already recorded for that student and day)
    -   `notes`: Free-text notes (Optional). Used as the makeup reason when an obligation is created

    ```json
    {
        "date": "2025-09-15",
        "attendanceType": "clinical",
        "entries": [
            { "studentId": "S001", "status": "Present" },
            { "studentId": "S002", "status": "Absent", "notes": "Sick" },
            { "studentId": "S003", "status": "Partial", "hoursAttended": 5 }
        ]
    }
    ```

### Validation

The whole day is rejected (`400`) if any entry is invalid; nothing is written. The error detail names the
offending entry by `index` and `studentId`. Unknown students are rejected with `404`.

### Makeup Hours

Only clinical attendance creates makeup obligations:

-   `Absent`: owes `hoursRequired`
-   `Partial`: owes `hoursRequired - hoursAttended` (nothing if the full time was attended)
-   `Present`, `Tardy`, `Excused`: owes nothing; an obligation left over from an earlier submission is removed

---

### Response Format

```json
{
    "saved": [ { "id": "ATT-S002-2025-09-15-clinical", "status": "Absent", "hoursRequired": 8.0, ... } ],
    "derivedObligations": [ { "id": "MKP-ATT-S002-2025-09-15-clinical", "hoursOwed": 8.0, "hoursCompleted": 0.0, "status": "pending", ... } ],
    "removedObligationIds": []
}
```
"""
