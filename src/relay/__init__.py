"""Multi-tenant payment webhook relay and provider gateway core."""

__version__ = "0.1.0"
