"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- mongo: Document persistence (MongoDB via motor)
- storage: Object storage (S3-compatible via boto3)
- realtime: WebSocket push channel

These wrappers translate between external formats and our domain models.
"""
