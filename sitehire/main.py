# sitehire/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routes import routers
from .config import settings
from .database import close_store
from .errors import AuthError, MarketplaceError, StoreError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SiteHire API", version="1.0.0")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
for router in routers:
    app.include_router(router)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    headers = None
    if isinstance(exc, StoreError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    elif isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or "body"
    if first.get("type") == "missing":
        detail = f"Missing required field: {field}"
    else:
        detail = f"Invalid field {field}: {first.get('msg', 'invalid value')}"
    return JSONResponse(status_code=400, content={"detail": detail, "field": field})


@app.on_event("shutdown")
async def shutdown():
    await close_store()


@app.get("/")
def health_check():
    return {"status": "healthy", "version": app.version}
