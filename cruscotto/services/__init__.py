"""
High-level use cases for the dashboard.

Each page has a service module that loads the project's records, maps them
to view models, applies the UI filters and sorts them. Routers call these
services instead of reading the JSON files directly.
"""
