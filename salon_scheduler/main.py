from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from salon_scheduler.api.v1.availability import router as availability_router
from salon_scheduler.api.v1.bookings import router as bookings_router
from salon_scheduler.api.v1.technicians import router as technicians_router
from salon_scheduler.core.config import settings
from salon_scheduler.core.logging_config import configure_logging
from salon_scheduler.wiring.dependencies import close_email_sender, get_expiration_sweeper

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if settings.EXPIRATION_SWEEP_ENABLED:
        sweeper = get_expiration_sweeper()
        sweeper.start()
    else:
        logger.info("Expiration sweeper disabled")
    try:
        yield
    finally:
        if sweeper is not None:
            await sweeper.stop(timeout=10.0)
        await close_email_sender()


app = FastAPI(title=f"{settings.SALON_NAME} Scheduling", version="1.0.0", lifespan=lifespan)

app.include_router(availability_router, prefix="/api/v1", tags=["availability"])
app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(technicians_router, prefix="/api/v1", tags=["technicians"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
