import logging

from fastapi import FastAPI

from bookverse_api.api.routes.books import router as books_router
from bookverse_api.api.routes.recommendations import router as recommendations_router
from bookverse_api.api.routes.reviews import router as reviews_router
from bookverse_api.api.routes.users import router as users_router
from bookverse_api.config import settings
from bookverse_api.logging_config import configure_logging
from bookverse_api.middleware import RequestContextMiddleware
from bookverse_api.services.recommendation_cache import RecommendationCache

configure_logging(
    level=settings.log_level,
    output_format=settings.log_format,
    service_name=settings.log_service_name,
)
logger = logging.getLogger(__name__)
logger.info("Application bootstrapped")

app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
)
app.state.recommendation_cache = RecommendationCache(
    ttl_seconds=settings.recommendation_cache_ttl_seconds
)
app.add_middleware(RequestContextMiddleware)
app.include_router(books_router)
app.include_router(recommendations_router)
app.include_router(reviews_router)
app.include_router(users_router)


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok"}
