"""FastAPI application exposing the payment gateway and webhook relay."""

__version__ = "0.1.0"
