"""
Backend clients shared by the callable functions.

This package holds the settings, the database and object storage
abstractions, and the per-instance client wiring, each with an in-memory
implementation for local development and tests.
"""
