import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from matchgroup.database import init_db
from matchgroup.routes import match_groups

logger = logging.getLogger(__name__)

APP_NAME = "Match Group API"

app = FastAPI(title=APP_NAME)

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
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Read-only match group endpoints
app.include_router(match_groups.router, prefix="/api", tags=["match-groups"])


@app.on_event("startup")
def on_startup():
    init_db()

    route_count = 0
    for r in app.routes:
        path = getattr(r, "path", None)
        if path:
            methods = getattr(r, "methods", None)
            logger.debug("%-20s %s", ", ".join(sorted(methods)) if methods else "N/A", path)
            route_count += 1
    logger.info("%s started with %d routes", APP_NAME, route_count)


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}
