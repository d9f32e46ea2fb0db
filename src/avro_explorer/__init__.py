"""
avro_explorer - explore Apache Avro object container files.

Decodes container files against their embedded writer schema, projects
fields, filters rows by pattern and renders the result as a table, CSV or
JSON lines.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
