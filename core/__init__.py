"""
core
----

Clinical hours and makeup-hours compliance engine:

- aggregator:  Fold clinical-log entries into direct / simulation / makeup hour totals, per site.
- classifier:  Apply the regulatory thresholds to aggregated hours (status labels, alert levels, flags).
- attendance:  Validate and persist one day's attendance for a cohort.
- deriver:     Create, update and remove makeup obligations from clinical attendance.
- ledger:      Track makeup balances and log completed hours.
- store:       Record store contract and the in-memory implementation.
- engine:      ComplianceEngine, the entry point used by the API.
"""
