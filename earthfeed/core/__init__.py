"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants, endpoint templates, default stream sources
- exceptions: Feed error taxonomy
- clock: Monotonic time and cancellable timers over asyncio
- log_config: Logging handler setup for entry points
"""
