"""
GameHub API - FastAPI Main Entry

Aggregates deals (CheapShark), catalog (RAWG), reviews (GameSpot) and news
(Steam) into one JSON contract for the browsing frontend.

✅ LOCAL:
    cd backend
    python -m uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

✅ TEST:
    curl -i http://127.0.0.1:8000/health
    curl -i "http://127.0.0.1:8000/deals?sortBy=Savings"
    curl -i "http://127.0.0.1:8000/news?limit=20&offset=0"

✅ PRODUCTION:
    Start Command:
        python -m uvicorn app.main:app --host 0.0.0.0 --port $PORT

    Env:
        RAWG_API_KEY, GAMESPOT_API_KEY (optional: LOG_LEVEL, *_MIN_INTERVAL_SECONDS, ...)
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ✅ Routers
from app.api.routes_deals import router as deals_router
from app.api.routes_games import router as games_router
from app.api.routes_meta import router as meta_router
from app.api.routes_news import router as news_router
from app.api.routes_reviews import router as reviews_router
from app.core.config import settings
from app.core.errors import NotFound, UpstreamError

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    logger.info("Not found (%s): %s", exc.source, exc.message)
    return JSONResponse(status_code=404, content={"error": "Not found", "message": exc.message})


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    # Detail endpoints need "try again" (500) distinguishable from "not found" (404)
    logger.error("❌ Upstream failure (%s) on %s: %s", exc.source, request.url.path, exc.message)
    return JSONResponse(
        status_code=500,
        content={
            "error": f"Failed to fetch from {exc.source}",
            "message": "There was an error retrieving the data. Please try again later.",
        },
    )


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="GameHub API",
        version=settings.APP_VERSION,
        description="Deals, catalog, reviews and news aggregated from third-party gaming APIs",
    )

    # ✅ CORS (the browsing frontend calls this from the browser)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Typed upstream errors -> {error, message}
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)

    # ✅ Mount routers
    app.include_router(meta_router)
    app.include_router(deals_router)
    app.include_router(games_router)
    app.include_router(news_router)
    app.include_router(reviews_router)

    return app


app = create_app()
