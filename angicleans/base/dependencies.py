from fastapi import Depends, Request

from angicleans.quote.delivery import QuoteMailer
from angicleans.quote.ratelimit import RateLimiter
from angicleans.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_mailer(settings: Settings = Depends(get_settings)) -> QuoteMailer:
    return QuoteMailer(settings)
