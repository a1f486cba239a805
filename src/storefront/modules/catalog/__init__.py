"""Catalog module: menu items, services and professionals."""
