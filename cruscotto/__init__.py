"""Cruscotto Progetti: project dashboard over Airtable exports."""

__version__ = "0.1.0"
