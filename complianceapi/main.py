import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from complianceapi.config import config
from complianceapi.database import database
from complianceapi.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidScheduleError,
    NotFoundError,
)
from complianceapi.logging_conf import configure_logging
from complianceapi.routers.analytics import router as analytics_router
from complianceapi.routers.form import router as form_router
from complianceapi.routers.submission import router as submission_router
from complianceapi.routers.task import router as task_router
from complianceapi.routers.user import router as user_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # connect database
    await database.connect()
    yield
    # disconnect database
    await database.disconnect()

app = FastAPI(
    title="Compliance Tracker API",
    description="Form assignment, completion tracking and analytics for healthcare compliance",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidScheduleError)
async def invalid_schedule_handler(request: Request, exc: InvalidScheduleError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(AuthenticationError)
async def authentication_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(Exception)
async def unhandled_exc_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
async def healthcheck():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(user_router, prefix="/api/user", tags=["User"])
app.include_router(form_router, prefix="/api/form", tags=["Form"])
app.include_router(task_router, prefix="/api/task", tags=["Task"])
app.include_router(submission_router, prefix="/api/submission", tags=["Submission"])
app.include_router(analytics_router, prefix="/api/analytics", tags=["Analytics"])
