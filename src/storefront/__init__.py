"""Public reservation and order intake service for multi-tenant storefronts."""

__version__ = "0.1.0"
