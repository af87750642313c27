# ccube/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from ccube.core.config import get_settings
from ccube.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from ccube.models import product as _product_models  # noqa: F401
from ccube.models import discount as _discount_models  # noqa: F401
from ccube.models import cart as _cart_models  # noqa: F401


# Routers
from ccube.routers.products import router as products_router
from ccube.routers.discounts import router as discounts_router
from ccube.routers.cart import router as cart_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the catalog, promotion and cart tables before serving.

    Carts are not swept here; expired carts are emptied on their next
    read and `cleanup_carts.py` removes stale rows in bulk.
    """
    logger.info("🛒 CCube API starting: preparing catalog and cart tables...")
    try:
        create_db_and_tables()
    except Exception as e:
        logger.error(f"❌ Could not prepare tables: {e}")
        raise
    logger.info(
        f"✅ Ready: tax rate {settings.TAX_RATE:.0%}, "
        f"carts expire after {settings.CART_EXPIRATION_MINUTES} minutes"
    )
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "CCube Storefront API",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(discounts_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "ccube-backend"}
