"""Vendor key normalization for the shared analysis cache."""

import re

UNKNOWN_VENDOR = "unknown_vendor"

_STORE_NUMBER = re.compile(r"\s+(?:#|store|no|unit|ste)\s*\d+$")
_TRAILING_DIGITS = re.compile(r"\s+\d{3,}$")
_LEGAL_SUFFIX = re.compile(r"\b(?:inc|llc|corp|ltd|co)\.?$")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_vendor_name(name: str | None) -> str:
    """
    Map a merchant name to its cache key.

    Pure and deterministic, so "Coffee Co.", "COFFEE CO" and
    "coffee co #1234" all land on "coffee".

    Steps:
        1. trim and lowercase
        2. drop trailing store numbers ("#123", "store 45", long digit runs)
        3. drop a trailing legal suffix (inc, llc, corp, ltd, co)
        4. "&" becomes "and", other punctuation is removed
        5. whitespace runs become "_", leading/trailing "_" stripped

    Returns:
        The normalized key, or "unknown_vendor" when nothing is left
    """
    if not name:
        return UNKNOWN_VENDOR

    key = name.strip().lower()
    key = _STORE_NUMBER.sub("", key)
    key = _TRAILING_DIGITS.sub("", key)
    key = _LEGAL_SUFFIX.sub("", key.strip())
    key = key.replace("&", " and ")
    key = _NON_ALNUM.sub("", key)
    key = _WHITESPACE.sub("_", key.strip())
    key = key.strip("_")

    return key or UNKNOWN_VENDOR


def is_cacheable(vendor_key: str) -> bool:
    """The catch-all key would mix unrelated merchants, so it is never cached."""
    return vendor_key != UNKNOWN_VENDOR
