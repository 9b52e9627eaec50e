# Imports from standard library or third-party packages
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Imports from this project
from config import CORS_ORIGINS, LOG_LEVEL
from database import create_mongo_client
from errors import BloodBankError
from routers import (
    auth,
    users,
    donation_requests,
    blogs,
    funds,
    contact,
    dashboard,
)

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.mongo_client = create_mongo_client()
    try:
        await app.state.mongo_client.admin.command("ping")
        logging.info("Connexion à MongoDB réussie (ping).")
    except PyMongoError as e:
        logging.error(f"MongoDB injoignable au démarrage: {e}")
    yield
    await app.state.mongo_client.close()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI):
    """Toutes les erreurs sortent sous la forme {"message": ...}."""

    @app.exception_handler(BloodBankError)
    async def blood_bank_error_handler(request: Request, exc: BloodBankError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


def create_app():
    """Crée et configure l'instance de l'application FastAPI."""
    app = FastAPI(
        title="BloodBank API",
        description="API de coordination des dons de sang",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configuration CORS : le cookie de session impose des origines explicites
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Inclusion des routeurs
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(users.router, tags=["Users"])
    app.include_router(donation_requests.router, tags=["Donation Requests"])
    app.include_router(dashboard.router, tags=["Dashboard"])
    app.include_router(blogs.router, tags=["Blogs"])
    app.include_router(funds.router, tags=["Funds"])
    app.include_router(contact.router, tags=["Contact"])

    @app.get("/", tags=["Root"])
    def read_root():
        return "Hello from BloodBank Server.."

    return app
