import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docscope.config import settings
from docscope.db.mongodb import close_mongodb, init_mongodb
from docscope.middleware.error_handler import ConfigurationError, ErrorHandlerMiddleware
from docscope.routes import collections, hierarchy, relationships, stats, trends

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger(__name__)
    app.state.store = None
    try:
        app.state.store = init_mongodb(settings)
        logger.info("Document store client initialised for database '%s'", settings.mongodb_db)
    except ConfigurationError as e:
        # Surfaced per request by get_store
        app.state.store_error = e.detail
        logger.error("Document store is not configured: %s", e.detail)
    yield
    await close_mongodb(app.state.store)
    logger.info("Document store client closed")


app = FastAPI(title="Docscope", version="0.1.0", lifespan=lifespan)

# Middleware (order matters: outermost first)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Routes
app.include_router(collections.router, prefix="/api")
app.include_router(stats.router, prefix="/api")
app.include_router(trends.router, prefix="/api")
app.include_router(relationships.router, prefix="/api")
app.include_router(hierarchy.router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn

    uvicorn.run("docscope.main:app", host=settings.backend_host, port=settings.backend_port)
