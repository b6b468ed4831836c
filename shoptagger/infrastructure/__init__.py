"""Infrastructure module.

Contains configuration, the Shopify GraphQL client, persistence and the
background job runner.
"""
