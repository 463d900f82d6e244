import logging
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .constants import Collections
from .database import get_db
from .core.middleware import ExceptionHandlingMiddleware, register_exception_handlers
from .schemas.result import Result, Error

# Import routes
from .api.v1 import (
    categories,
    fridges,
    households,
    messaging,
    notifications,
    products,
    shopping_list,
    users,
    websocket,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    description="Fridgy API - Shared household fridges, inventory and shopping lists",
)

# Add exception handling middleware FIRST
app.add_middleware(ExceptionHandlingMiddleware, log_internal_errors=True)
register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users.router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(
    households.router,
    prefix=f"{settings.API_V1_STR}/households",
    tags=["households"]
)
app.include_router(
    shopping_list.router,
    prefix=f"{settings.API_V1_STR}/households",
    tags=["shopping-list"]
)
app.include_router(
    fridges.router,
    prefix=f"{settings.API_V1_STR}/fridges",
    tags=["fridges"]
)
app.include_router(
    products.router,
    prefix=f"{settings.API_V1_STR}/products",
    tags=["products"]
)
app.include_router(
    categories.router,
    prefix=f"{settings.API_V1_STR}/categories",
    tags=["categories"]
)
app.include_router(
    notifications.router,
    prefix=f"{settings.API_V1_STR}/notifications",
    tags=["notifications"]
)
app.include_router(
    messaging.router,
    prefix=f"{settings.API_V1_STR}/messaging",
    tags=["messaging"]
)
app.include_router(websocket.router, prefix=settings.API_V1_STR, tags=["streams"])


@app.get("/", response_model=Result[dict])
async def root():
    """Root endpoint with API information"""
    return Result.successful(
        data={
            "message": f"Welcome to {settings.PROJECT_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs",
            "status": "online",
        }
    )


@app.get("/health", response_model=Result[dict])
async def health_check(db=Depends(get_db)):
    """Health check endpoint for monitoring"""
    try:
        list(db.collection(Collections.CATEGORIES).limit(1).stream())
        return Result.successful(data={"status": "healthy", "database": "connected"})
    except Exception as e:
        return Result.failure(
            error=Error.internal(f"Health check failed: {str(e)}", status_code=503)
        )
