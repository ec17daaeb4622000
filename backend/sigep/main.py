"""SIGEP - personnel administration API"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sigep.auth import require_user
from sigep.config import settings
from sigep.database import AsyncSessionLocal, init_db
from sigep.routers import (
    absences,
    auth,
    dashboard,
    functional_records,
    lookups,
    per_diem,
    persons,
    reports,
    shift_schedules,
    weapons,
)
from sigep.services.reference_data import seed_reference_data
from sigep.services.status_registry import load_status_registry

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    async with AsyncSessionLocal() as db:
        if settings.seed_reference_data:
            await seed_reference_data(db)
            await db.commit()
        await load_status_registry(db)
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Personnel administration: HR records, attendance, per diem, weapons",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

protected = [Depends(require_user)]

app.include_router(auth.router)
app.include_router(persons.router, dependencies=protected)
app.include_router(functional_records.router, dependencies=protected)
app.include_router(absences.router, dependencies=protected)
app.include_router(shift_schedules.router, dependencies=protected)
app.include_router(per_diem.router, dependencies=protected)
app.include_router(weapons.router, dependencies=protected)
app.include_router(lookups.router, dependencies=protected)
app.include_router(dashboard.router, dependencies=protected)
app.include_router(reports.router, dependencies=protected)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=jsonable_encoder({"detail": "Invalid data", "errors": errors}))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    if isinstance(exc, HTTPException):
        raise exc
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health():
    return {"status": "ok"}
