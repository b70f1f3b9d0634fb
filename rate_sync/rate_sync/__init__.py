"""Crypto rate sync service."""
