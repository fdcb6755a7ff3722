import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from telemed.core.config import settings
from telemed.core.lifecycle import InvalidTransitionError
from telemed.core.scheduler import start_scheduler, stop_scheduler
from telemed.database import Base, engine
from telemed import models  # noqa: F401  registers the tables
from telemed.routers import doctors, schedule, consultations, prescriptions, appointments, feedback, health_tips

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TeleMed Consultation API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(doctors.router)
app.include_router(schedule.router)
app.include_router(consultations.router)
app.include_router(prescriptions.router)
app.include_router(appointments.router)
app.include_router(feedback.router)
app.include_router(health_tips.router)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    logger.warning(f"Rejected status change on {request.url.path}: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event():
    # Create database tables
    Base.metadata.create_all(bind=engine)

    if settings.ENABLE_SCHEDULER:
        start_scheduler()
        logger.info("✅ Booking sweep scheduler started")


@app.on_event("shutdown")
async def shutdown_event():
    stop_scheduler()


@app.get("/")
async def root():
    return {"message": "Welcome to TeleMed Consultation API"}
