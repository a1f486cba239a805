"""Orders module: pickup orders, their line items and payment intents."""
