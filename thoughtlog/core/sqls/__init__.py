"""
SQL statements
"""

from . import queries, schema

__all__ = ["queries", "schema"]
