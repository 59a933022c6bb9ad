"""
Shared utilities for the Hydra consent client.

This package aggregates the ambient building blocks used by the client:

- config: Client configuration via pydantic-settings
- logging: Structured logging with trace correlation
- errors: Canonical error types and responses

Do not import from hydra_client into shared/.
"""
