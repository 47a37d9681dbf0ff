"""Rate limiting adapters.

The HTTP layer depends on AbstractRateLimiter only, so the per-process store
can be replaced by a shared one without touching the middleware.
"""
