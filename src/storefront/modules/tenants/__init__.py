"""Tenants module: website records, host resolution and origin trust."""
