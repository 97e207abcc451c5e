from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.logger import logger
from contextlib import asynccontextmanager
from app.core.database import init_models, close_engine
from app.api.v1.api import api_router
from app.models import exam_detail, student


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} environment")
    logger.debug(f"Database URL: {settings.DATABASE_URL}")

    try:
        await init_models()
        logger.success("Database initialized")
    except Exception as e:
        logger.critical(f"Database initialization failed: {e}")
        raise

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await close_engine()

app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "service": settings.PROJECT_NAME, "version": "1.0.0"}
