"""Utility functions for the workflow designer."""

from designer.utils.identifiers import (
    generate_local_id,
    generate_name_suffix,
    utc_timestamp,
)

__all__ = [
    "generate_local_id",
    "generate_name_suffix",
    "utc_timestamp",
]
