"""Utility helpers shared by the relay core and the HTTP layer."""
