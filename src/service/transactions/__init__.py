"""
Transaction identity, merge and vendor normalization.
"""

from .identity import deduplicate, identify, merge
from .vendors import UNKNOWN_VENDOR, is_cacheable, normalize_vendor_name

__all__ = [
    "deduplicate",
    "identify",
    "merge",
    "UNKNOWN_VENDOR",
    "is_cacheable",
    "normalize_vendor_name",
]
