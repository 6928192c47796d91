"""
Impact Ledger - Ethical Impact Analysis & Credit Ledger Service

A FastAPI-based microservice that annotates bank transactions with
per-practice ethical impact, aggregates societal debt and credit,
and lets users apply earned credit against outstanding debt.
"""

__version__ = "0.1.0"
