import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .middleware.auth import APIKeyMiddleware
from .middleware.logging import LoggingMiddleware
from .routers import christian as christian_router
from .routers import islamic as islamic_router
from .routers import jewish as jewish_router
from .routers import location as location_router
from .routers import lunar as lunar_router
from .routers import solar as solar_router
from .services.ephem import ENGINE_VERSION, init_paths
from .services.errors import CalculationInputError

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
init_paths(os.getenv("SE_EPHE_PATH"))


app = FastAPI(title="celestial-calendar", version="0.3.0")

# Configure CORS - localhost for development, configured origins otherwise
app_env = os.getenv("APP_ENV")
is_dev = app_env is None or app_env.lower() in {"dev", "development"}

if is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "Content-Type"],
        max_age=86400,
    )
else:
    allowed = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "").split(",") if origin.strip()]
    preview = os.getenv("PREVIEW_ORIGIN")
    if preview:
        allowed.append(preview)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "Content-Type"],
        max_age=86400,
    )

app.add_middleware(APIKeyMiddleware)
app.add_middleware(LoggingMiddleware)

app.include_router(location_router.router)
app.include_router(lunar_router.router)
app.include_router(islamic_router.router)
app.include_router(jewish_router.router)
app.include_router(christian_router.router)
app.include_router(solar_router.router)


@app.exception_handler(CalculationInputError)
async def calculation_input_error(request: Request, exc: CalculationInputError):
    return JSONResponse({"valid": False, "errors": exc.errors}, status_code=422)


@app.get("/__health")
def health():
    return {"ok": True, "engine": ENGINE_VERSION}


@app.get("/")
def root():
    return {"message": "celestial-calendar API is running. See /__health and /docs."}
