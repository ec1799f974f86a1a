"""Payment interval analyzer.

Reads payment lifecycle event logs (CSV), rebuilds per-payment status
histories and measures the time between two lifecycle statuses.
"""

__version__ = "0.1.0"
