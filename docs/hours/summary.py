hours_summary_description = """
Clinical hours and compliance status for one student, recomputed from the clinical log on every call.

### Query Parameters

-   `includePending`: Also count logs still awaiting approval (default `false`, approved logs only).
    Rejected logs never count.

---

### Response Format

```json
{
    "studentId": "S001",
    "totalHours": 410.0,
    "directHours": 300.0,
    "simHours": 110.0,
    "makeupHours": 0.0,
    "simPercentage": 27,
    "isCompliant": false,
    "hoursBySite": [
        { "siteName": "General Hospital", "totalHours": 300.0, "directHours": 300.0, "simHours": 0.0, "isMakeup": false }
    ],
    "simStatus": "Over Cap",
    "alertLevel": "over_cap",
    "progress": 1.025,
    "progressStatus": "COMPLIANCE RISK",
    "isAtRisk": false,
    "flags": [ { "type": "simulation_over", "severity": "critical", "message": "...", "details": "..." } ],
    "skippedEntryIds": []
}
```

-   `simStatus`: `Safe` (< 80h), `Warning` (80-100h), `Over Cap` (> 100h)
-   `isCompliant`: simulation hours within both the 100h and the 25% caps
-   `progressStatus`: first match of `COMPLIANCE RISK` (over the simulation cap), `Behind` (< 200h),
    `Near Completion` (>= 90% of required hours), `On Track`
"""
