"""
Shared Layer - Avro Explorer

Cross-cutting helpers used by the CLI and the pipeline. No decoding logic.

Contents:
- logging_utils.py: loguru sink configuration
- discovery.py: expansion of file arguments and glob patterns
"""

__all__ = ["discovery", "logging_utils"]
