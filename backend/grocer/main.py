"""
# `grocer/main.py` — Application entry point

The FastAPI app: CORS, logging, domain-error handlers and routers.

## Public routers
- `/auth`
- `/users`
- `/products`
- `/orders`
- `/geo`

## Admin routers (prefix `/admin`)
- `/products`
- `/users`
- `/orders`
- `/dashboard`

Every admin router is guarded by `require_admin` (Firebase `admin` custom claim).

Run locally with `uvicorn grocer.main:app --reload` from `backend/`.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from grocer.config import get_settings
from grocer.core.errors import GrocerError
from grocer.database import init_db
from grocer.routers import admin_dashboard, auth, geo, orders, products, users

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("grocer")


# Initialize FastAPI app
app = FastAPI(
    title="Campus Grocery Storefront API",
    description="Catalog, checkout and order management for campus grocery delivery.",
    version="1.0.0",
    debug=settings.debug,
)

# Configure CORS (allow front-end domain or all origins as specified)
allow_origins = [origin.strip() for origin in settings.allowed_origins.split(',')] if settings.allowed_origins else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GrocerError)
async def _grocer_error_handler(request: Request, exc: GrocerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def _database_error_handler(request: Request, exc: SQLAlchemyError):
    # No automatic retry; the client may resubmit
    logger.error("Database call failed on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Storage is temporarily unavailable. Please try again."})


# Include public routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(products.router)
app.include_router(orders.router)
app.include_router(geo.router)

# Include admin routers (with prefix /admin)
app.include_router(products.admin_router, prefix="/admin")
app.include_router(users.admin_router, prefix="/admin")
app.include_router(orders.admin_router, prefix="/admin")
app.include_router(admin_dashboard.router, prefix="/admin")


@app.on_event("startup")
async def _startup_database():
    init_db()
    logger.info("Database ready")


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("grocer.main:app", host="0.0.0.0", port=8000, reload=True)
