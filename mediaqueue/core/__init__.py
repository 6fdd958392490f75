"""Core components of mediaqueue."""
