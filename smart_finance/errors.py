"""Error taxonomy for the collaborators around the analytics engine.

The aggregation functions in :mod:`smart_finance.analytics` never raise for
well-typed input; these exceptions belong to the ledger and configuration
layers that feed them.
"""

from __future__ import annotations


class SmartFinanceError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(SmartFinanceError, ValueError):
    """A configuration value (timezone, ratio, timeframe) is invalid."""


class InvalidTransaction(SmartFinanceError, ValueError):
    """Transaction data failed ledger validation."""


class TransactionNotFound(SmartFinanceError, KeyError):
    """No transaction with the requested id exists in the ledger."""


class DataUnavailable(SmartFinanceError):
    """Fetching transaction records failed; the caller may retry."""


class PersistenceWriteFailed(SmartFinanceError):
    """Saving the ledger failed."""
