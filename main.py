from fastapi import FastAPI, Request
from api.schedule import router as schedule_router
from api.healthcheck import router as healthcheck_router
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi
from dotenv import load_dotenv
import os
import logging
import secrets
import utils.logger  # noqa: F401  attaches the file and stdout handlers

load_dotenv()
# env
API_KEY = os.getenv("API_KEY")
CORS_ALLOW_ORIGINS = [o for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o]
ALLOWED_HOSTS = [h for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h] or ["*"]
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", "0"))  # 0 = no limit
# REPAIR_STRATEGY is read per request in api/schedule.py

logger = logging.getLogger("api.main")

app = FastAPI(title="Day Scheduler API")

HEALTH_PATH = "/api/health/check"
PUBLIC_PATHS = {"/", "/openapi.json", "/redoc", "/docs", HEALTH_PATH}


def is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs/")


if not API_KEY:
    logger.warning("⚠️ API_KEY not set; requests are not authenticated (dev mode).")

# middlewares
if os.getenv("ENABLE_CORS") == "true":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(TrustedHostMiddleware, allowed_hosts=ALLOWED_HOSTS)


# reject oversized bodies before they are parsed
@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    length = request.headers.get("content-length")
    if MAX_BODY_BYTES > 0 and length and length.isdigit() and int(length) > MAX_BODY_BYTES:
        return JSONResponse(status_code=413, content={"detail": "Payload too large"})
    return await call_next(request)


@app.middleware("http")
async def api_key_guard(request: Request, call_next):
    if request.method == "OPTIONS" or is_public(request.url.path) or not API_KEY:
        return await call_next(request)

    client_key = request.headers.get("x-api-key")
    if not client_key or not secrets.compare_digest(str(client_key), str(API_KEY)):
        return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
    return await call_next(request)


def custom_openapi():
    """OpenAPI schema with the x-api-key header scheme on every route except health."""
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(
        title=app.title,
        version=app.version,
        description="Build a day schedule from a task pool and apply edits to it.",
        routes=app.routes,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})["ApiKeyAuth"] = {
        "type": "apiKey",
        "in": "header",
        "name": "x-api-key",
        "description": "Enter your API key",
    }
    for path, methods in schema.get("paths", {}).items():
        for op in methods.values():
            op["security"] = [] if is_public(path) else [{"ApiKeyAuth": []}]

    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.get("/")
def root():
    return {"message": "Day Scheduler API is running. Visit /docs for the Swagger UI."}


# Register routers
app.include_router(schedule_router, prefix="/api")
app.include_router(healthcheck_router, prefix="/api")
