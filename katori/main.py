import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from katori.api.endpoints import estimate, health
from katori.core.config import settings
from katori.services.estimation_service import EstimationService
from katori.services.ingredient_extractor import IngredientExtractor
from katori.services.llm.factory import get_llm_service
from katori.services.reference_store import load_reference_store

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=settings.LOG_LEVEL
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    store = load_reference_store(settings.REFERENCE_DATA_DIR)
    extractor = IngredientExtractor(get_llm_service())
    app.state.estimation_service = EstimationService(store, extractor)
    logger.info(f"{settings.APP_NAME} ready (provider: {settings.LLM_PROVIDER})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Estimate the nutrition of Indian home-cooked dishes from their name",
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1/health", tags=["health"])
app.include_router(estimate.router, prefix="/estimate", tags=["nutrition"])


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} is running!"}
