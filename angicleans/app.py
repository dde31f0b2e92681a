import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from angicleans.quote.ratelimit import RateLimiter
from angicleans.quote.router import router as quote_router
from angicleans.scheduler import sweep_rate_limits
from angicleans.settings import get_settings

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    settings = get_settings()
    limiter = RateLimiter()
    app.state.settings = settings
    app.state.rate_limiter = limiter

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sweep_rate_limits,
        "interval",
        minutes=settings.rate_limit_sweep_minutes,
        args=[limiter],
        id="sweep_rate_limits",
    )
    scheduler.start()
    yield
    scheduler.shutdown()
    limiter.reset()


app = FastAPI(title="Angie's Cleaning Service", lifespan=lifespan)
app.include_router(quote_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
