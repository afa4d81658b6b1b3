log_hours_description = """
Log completed makeup hours against one obligation.

### Request Body

-   `hours`: Hours completed, must be positive and no more than the remaining balance

    ```json
    { "hours": 4 }
    ```

---

### Response Format

The updated makeup record. `status` becomes `in_progress`, or `completed` (with `completionDate` set) once the
full balance is logged.

### Errors

-   `400`: `hours` is not positive, or exceeds the remaining balance. The detail carries `remaining` so the
    caller can retry with a corrected value.
-   `404`: Unknown makeup record.
-   `409`: The record was changed by another request while this one was being applied. Nothing was written.
"""
