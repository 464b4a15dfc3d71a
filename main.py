import os
import logging
from datetime import datetime
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables from .env file before anything reads them
load_dotenv()

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.routing import Match

from config.logging_config import setup_logging
from config.database import engine, Base, test_db_connection
from config.middleware import add_cors_middleware, add_request_logging
from shared_utils.errors import register_exception_handlers
from shared_utils.responses import envelope, error_envelope
from uploads.storage import LocalObjectStorage, PUBLIC_MOUNT
import models  # registers Retailer, Product and Order on Base.metadata
import auth.router, product.router, orders.router, retailer.router, uploads.router

# ------------- Logging -------------
setup_logging()
logger = logging.getLogger(__name__)

# ------------- JWT config (must match the identity provider) -------------
JWT_SECRET = os.getenv('JWT_SECRET_KEY', 'CHANGE_THIS_TO_A_LONG_RANDOM_STRING')
JWT_ALGORITHM = "HS256"

if JWT_SECRET == 'CHANGE_THIS_TO_A_LONG_RANDOM_STRING':
    logger.warning('WARNING: Using default JWT secret. Set JWT_SECRET_KEY in .env for production!')


# ------------- Lifespan -------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    logger.info("Storefront API starting up...")
    Base.metadata.create_all(bind=engine)

    yield

    logger.info("Storefront API shutting down...")
    engine.dispose()


# ------------- Create app -------------
app = FastAPI(title="Retailer Storefront API", version="1.0.0", lifespan=lifespan)

# Shared handles, built once per process and read-only afterwards
app.state.storage = LocalObjectStorage.from_env()


# ------------- JWT Authentication Middleware -------------
# PUBLIC ROUTES - exact match
PUBLIC_PATHS = {
    "/",
    "/health",
    "/api",
    "/openapi.json",
}

# PUBLIC ROUTES - prefix match
PUBLIC_PREFIXES = (
    "/docs",
    "/redoc",
    "/api/retailer/store/",
    PUBLIC_MOUNT + "/",
)


def _is_routed(request: Request) -> bool:
    """True when some route or mount answers this path (with any method)"""
    return any(route.matches(request.scope)[0] != Match.NONE for route in request.app.router.routes)


async def jwt_middleware(request: Request, call_next):
    """
    Verify the bearer token issued by the identity provider and expose the
    identity on request.state. Resolving the retailer profile happens in the
    route dependencies.

    Unknown paths skip the check and fall through to the 404 handler.
    """
    path = request.url.path
    if request.method == "OPTIONS" or path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES):
        return await call_next(request)
    if not _is_routed(request):
        return await call_next(request)

    auth_header = request.headers.get("Authorization", "")

    if not auth_header.startswith("Bearer ") or not auth_header[len("Bearer "):].strip():
        return JSONResponse(
            status_code=401,
            content=error_envelope("Access token is required. Please include Authorization header.")
        )

    token = auth_header[len("Bearer "):].strip()

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM], options={"verify_aud": False})
    except ExpiredSignatureError:
        return JSONResponse(
            status_code=401,
            content=error_envelope("Token expired. Please login again.")
        )
    except InvalidTokenError:
        return JSONResponse(
            status_code=401,
            content=error_envelope("Invalid or expired token. Please login again.")
        )

    user_id = payload.get("sub")
    if not user_id:
        return JSONResponse(
            status_code=401,
            content=error_envelope("Invalid or expired token. Please login again.")
        )

    request.state.user_id = str(user_id)
    request.state.user_email = payload.get("email")
    return await call_next(request)


app.middleware("http")(jwt_middleware)

# ------------- Request logging + CORS -------------
add_request_logging(app)
add_cors_middleware(app)

# ------------- Errors -------------
register_exception_handlers(app)

# ------------- Routers -------------
app.include_router(auth.router.router)
app.include_router(product.router.router)
app.include_router(orders.router.router)
app.include_router(retailer.router.router)
app.include_router(uploads.router.router)

app.mount(PUBLIC_MOUNT, StaticFiles(directory=str(app.state.storage.root), check_dir=False), name="public-assets")


# ------------- Health + index endpoints -------------
@app.get("/health")
def health_check():
    db_connected = test_db_connection()
    return envelope(
        {
            "database": "connected" if db_connected else "disconnected",
            "environment": os.getenv("APP_ENV", "development"),
            "timestamp": datetime.utcnow().isoformat() + "Z",
        },
        message="Server is running successfully",
    )


@app.get("/")
def read_root():
    return envelope(message="Retailer Storefront API is running")


@app.get("/api")
def api_index():
    return envelope(
        {
            "auth": {
                "register": "POST /api/auth/register",
                "profile": "GET /api/auth/me",
            },
            "products": {
                "create": "POST /api/products",
                "list": "GET /api/products",
                "categories": "GET /api/products/categories",
                "get": "GET /api/products/:id",
                "update": "PUT /api/products/:id",
                "toggleStatus": "PATCH /api/products/:id/toggle-status",
                "delete": "DELETE /api/products/:id",
            },
            "orders": {
                "create": "POST /api/orders",
                "list": "GET /api/orders",
                "stats": "GET /api/orders/stats",
                "get": "GET /api/orders/:id",
                "updateStatus": "PUT /api/orders/:id",
                "delete": "DELETE /api/orders/:id",
            },
            "retailer": {
                "settings": "GET /api/retailer/settings",
                "updateSettings": "PUT /api/retailer/settings",
                "dashboard": "GET /api/retailer/dashboard",
                "themes": "GET /api/retailer/themes",
                "updateTheme": "PATCH /api/retailer/theme",
                "publicStore": "GET /api/retailer/store/:retailerId",
            },
            "uploads": {
                "logo": "POST /api/uploads/logo",
                "banner": "POST /api/uploads/banner",
            },
        },
        message="Retailer Storefront API v1.0",
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
