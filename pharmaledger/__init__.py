"""Stock and ledger reconciliation service for multi-tenant retail pharmacies."""

__version__ = "0.1.0"
