# Bitforex Connector Package
"""
Normalized access to the Bitforex spot REST API: market catalog, tickers,
order placement / cancellation / lookup and request signing.
"""

__version__ = "0.1.0"
