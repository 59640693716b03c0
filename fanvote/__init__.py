"""Attendance verification and ranked-ballot aggregation for live contests."""
