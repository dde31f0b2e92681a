import logging

from angicleans.quote.ratelimit import RateLimiter

logger = logging.getLogger(__name__)


async def sweep_rate_limits(limiter: RateLimiter) -> None:
    removed = limiter.sweep()
    if removed:
        logger.info("Removed %d expired rate limit entries", removed)
