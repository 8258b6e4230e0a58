import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

import skeleton.api.routes_health as routes_health
from skeleton.api.helpers import error
from skeleton.core.config import Settings
from skeleton.core.exceptions import SkeletonError
from skeleton.core.middleware import AccessLogMiddleware, RecoverMiddleware
from skeleton.db.core import Database
from skeleton.repo import init_repo, new_repo

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).parent / "web" / "public"
SWAGGER_PREFIX = "/api/swagger"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # schema must be in place before the first request is accepted
    await init_repo(app.state.repo)
    logger.info("Starting up...")
    yield
    logger.info("Shutting down...")
    await app.state.db.close()


def create_app(settings: Settings, db: Optional[Database] = None) -> FastAPI:
    if db is None:
        db = Database.open(settings.DSN, echo=settings.ECHO_SQL)
    repo = new_repo(db)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.PROJECT_DESCRIPTION,
        lifespan=lifespan,
        openapi_url=f"{SWAGGER_PREFIX}/doc.json",
        docs_url=f"{SWAGGER_PREFIX}/index.html",
        swagger_ui_oauth2_redirect_url=f"{SWAGGER_PREFIX}/oauth2-redirect.html",
        redoc_url=None,
        swagger_ui_parameters={"defaultModelsExpandDepth": -1},
    )
    app.state.settings = settings
    app.state.db = db
    app.state.repo = repo

    # last added runs first: cors -> access log -> recover -> gzip
    app.add_middleware(GZipMiddleware)
    app.add_middleware(RecoverMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        routes_health.router,
        prefix="/api"
    )

    @app.exception_handler(SkeletonError)
    async def skeleton_error_handler(request: Request, ex: SkeletonError):
        return JSONResponse(status_code=ex.status_code, content=error(ex).model_dump(exclude_none=True))

    @app.get(SWAGGER_PREFIX, include_in_schema=False)
    @app.get(f"{SWAGGER_PREFIX}/", include_in_schema=False)
    async def swagger_redirect():
        return RedirectResponse(url=f"{SWAGGER_PREFIX}/index.html")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(PUBLIC_DIR / "index.html")

    @app.get("/200", include_in_schema=False)
    async def page_200():
        return FileResponse(PUBLIC_DIR / "200.html")

    # everything else comes from the bundle, unknown paths get 404.html
    app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True), name="static")

    return app
