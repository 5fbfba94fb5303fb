"""
Persistence adapters.

Today the data lives in JSON files produced by the Airtable sync; services
go through json_storage instead of touching the files directly.
"""
