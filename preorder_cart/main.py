import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .database import Base, check_connection, engine
from .api.routes.cart import router as cart_router
from .api.routes.catalog import router as catalog_router
from .exceptions import CartError
from .services.kafka_client import kafka_client
from . import models  # noqa: F401  регистрирует таблицы в Base.metadata

# Настройка логирования
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    logger.info("Starting Preorder Cart Service...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    if settings.kafka_enabled:
        try:
            await kafka_client.start_producer()
        except Exception as e:
            # корзина работает и без пересылки событий
            logger.error(f"❌ Kafka unavailable, cart events will not be forwarded: {e}")

    logger.info("✅ Preorder Cart Service started successfully!")

    yield  # Приложение работает

    logger.info("Shutting down Preorder Cart Service...")
    await kafka_client.stop_producer()
    logger.info("✅ Preorder Cart Service shut down successfully!")


# Создаем FastAPI приложение
app = FastAPI(
    title=settings.app_name,
    description="Корзина и оформление предзаказов в кафе",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

# Middleware для CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Подключаем роуты
app.include_router(cart_router, prefix="/api/v1", tags=["cart"])
app.include_router(catalog_router, prefix="/api/v1", tags=["catalog"])


# Health check endpoints
@app.get("/health")
async def health_check():
    """Проверка здоровья сервиса"""
    try:
        storage_status = "connected" if check_connection() else "disconnected"
    except SQLAlchemyError as e:
        logger.error(f"Storage check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "storage": storage_status,
        "kafka": "connected" if kafka_client.producer else "disconnected",
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Корневой endpoint"""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "cart": "/api/v1/cart",
            "restaurants": "/api/v1/restaurants"
        }
    }


# Exception handlers
@app.exception_handler(CartError)
async def cart_error_handler(request: Request, exc: CartError):
    logger.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.__class__.__name__, "detail": str(exc)}
    )


@app.exception_handler(404)
async def not_found_handler(request, exc):
    return JSONResponse(
        status_code=404,
        content={"error": "Resource not found", "detail": str(exc.detail) if hasattr(exc, 'detail') else "Not found"}
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    logger.error(f"Internal server error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": "Something went wrong"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "preorder_cart.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
