"""
Shared utilities for the Aplos token sidecar.

This package holds the building blocks the service is assembled from:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation and redaction
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI app skeleton, middleware and error handlers

Do not import from service_* packages into shared/.
"""
