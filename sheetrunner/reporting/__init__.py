"""
Reporting for SheetRunner runs.

Per-test step logs, the HTML/JSON run report, the report email, the CSV
results log and AI insights.
"""
