"""
Application Layer

Process-level plumbing around the stores: configuration, logging and error
reporting bootstrap, metrics, and the periodic expiry sweep.

Key Components:
- config.py: Settings loaded from the environment with pydantic-settings
- cli.py: Logging configuration and Sentry initialisation
- metrics.py: Metrics client abstraction over aio-statsd
- tasks.py: Background task that sweeps expired codes and tokens
"""
