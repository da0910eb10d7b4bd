"""End-to-end scenario tests for the idempotency middleware.

Each scenario exercises one aspect of idempotency handling through the
public entry points: the ASGI adapter or the core middleware.
"""
