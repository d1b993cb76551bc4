"""
Observation tools: per-cycle records and console reports.
"""
