"""
Shared utilities for the Ping service.

This package aggregates common building blocks consumed by the service and
its tooling:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI bootstrap shared by services

Do not import from service_* packages into shared/.
"""
