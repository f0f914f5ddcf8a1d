import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from court_scheduler import __version__
from court_scheduler.database import init_db
from court_scheduler.routes import court_assignment, master_schedule

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Court Scheduler API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(court_assignment.router, prefix="/api", tags=["court-assignment"])
app.include_router(master_schedule.router, prefix="/api", tags=["master-schedule"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Court Scheduler API %s started (%s routes)", __version__, len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": "Court Scheduler API", "version": __version__, "status": "healthy"}
