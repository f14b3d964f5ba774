from .fixed_window import FixedWindowRateLimiter, RateLimitDecision

__all__ = ["FixedWindowRateLimiter", "RateLimitDecision"]
