"""Shift Timeclock package.

Feature modules (jobs, scheduling, clocking, punches) hold the pure shift and
punch decision logic; repositories and a thin Flask layer sit around them.
"""
