"""duka – optimistic stock reconciliation for small-shop inventory."""

__version__ = "0.1.0"
