"""Checker plugins and the type-id registry that resolves them."""
