"""Core logic: configuration, calendar, reconciliation and API clients."""
