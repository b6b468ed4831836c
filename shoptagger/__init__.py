"""Shopify bulk product tagging and test-data service."""
