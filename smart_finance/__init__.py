"""Analytics core for the Smart Finance app."""

from . import analytics, config, dashboard, errors, features, ledger, models, synth, utils
from .analytics import analyze
from .config import AnalyticsConfig, InsightThresholds, Timeframe, load_config
from .models import AnalyticsResult, TransactionRecord

__all__ = [
	"AnalyticsConfig",
	"AnalyticsResult",
	"InsightThresholds",
	"Timeframe",
	"TransactionRecord",
	"analytics",
	"analyze",
	"config",
	"dashboard",
	"errors",
	"features",
	"ledger",
	"load_config",
	"models",
	"synth",
	"utils",
]
