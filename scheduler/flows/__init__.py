"""Prefect flows for the crypto rate sync schedule."""

__all__ = ["scheduled_rate_sync_flow"]


def __getattr__(name: str):
    """Lazy import to avoid circular import issues when running as __main__."""
    if name == "scheduled_rate_sync_flow":
        from flows.scheduled_sync import scheduled_rate_sync_flow

        return scheduled_rate_sync_flow
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
