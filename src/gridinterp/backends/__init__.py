"""Batch kernel backends."""
