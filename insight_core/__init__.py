"""Core domain logic for the health metrics and insight engine.

This package contains the log models, metric calculators, pattern detection,
meal parsing and report composition, isolated from storage and presentation
so every calculation can be tested with plain in-memory snapshots.
"""
