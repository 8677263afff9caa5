"""Job board authentication API."""
