"""
Core utilities shared across the dashboard.

This package hosts configuration (env vars, data paths, Airtable credentials)
and logging setup. Services and routers depend on these primitives instead of
reading os.environ directly.
"""
