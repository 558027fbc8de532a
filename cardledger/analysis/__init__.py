from cardledger.analysis.aggregation import compute_stats, filter_window
from cardledger.analysis.valuation import build_valuation_series
from cardledger.analysis.windows import Timeframe, cutoff_date

__all__ = [
    "Timeframe",
    "build_valuation_series",
    "compute_stats",
    "cutoff_date",
    "filter_window",
]
