"""Accounts, persistence and the caller-facing quest system."""
