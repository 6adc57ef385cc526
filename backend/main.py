from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from config import (
    ENVIRONMENT, DEBUG, CORS_ORIGINS,
    build_async_engine, build_sessionmaker, init_db
)
import logging

from routers.auth.auth import router as auth_router
from routers.users.users import router as users_router
from routers.farmer.farmer import router as farmer_router
from routers.interest.interest import router as interest_router
from routers.orders.orders import router as orders_router

IS_PRODUCTION = ENVIRONMENT == "prod"

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages) or "Invalid request"


def create_app(database_url: str = None, create_tables: bool = DEBUG) -> FastAPI:
    """
    Build the application: database engine, session factory and routers.
    Nothing connects to the database at import time.
    """
    engine = build_async_engine(database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            await init_db(engine)
        yield
        await engine.dispose()

    app = FastAPI(
        title="LocalHarvest API",
        description="Marketplace connecting local farmers, community admins and buyers for bulk produce orders.",
        version="1.0.0",
        root_path="/Prod" if IS_PRODUCTION else "",
        docs_url="/apidocs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _validation_message(exc)}
        )

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(farmer_router)
    app.include_router(interest_router)
    app.include_router(orders_router)

    @app.get("/docs", include_in_schema=False)
    async def api_documentation(request: Request):
        openapi_url = "/Prod/openapi.json" if IS_PRODUCTION else "/openapi.json"

        return HTMLResponse(
            f"""
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1, shrink-to-fit=no">
    <title>LocalHarvest API DOCS</title>

    <script src="https://unpkg.com/@stoplight/elements/web-components.min.js"></script>
    <link rel="stylesheet" href="https://unpkg.com/@stoplight/elements/styles.min.css">
  </head>
  <body>

    <elements-api
      apiDescriptionUrl="{openapi_url}"
      router="hash"
      theme="dark"
    />

  </body>
</html>"""
        )

    @app.get("/", response_class=HTMLResponse)
    def home():
        """Landing route for the LocalHarvest backend"""
        return """
    <html>
      <head>
        <title>LocalHarvest API</title>
      </head>
      <body>
        <h1>Welcome to LocalHarvest API</h1>
        <hr>
        <ul>
          <li><a href="/docs">Spotlight API Documentation</a></li>
          <li><a href="/redoc">Redoc API Documentation</a></li>
          <li><a href="/apidocs">Swagger API Documentation</a></li>
          <li><a href="/openapi.json">OpenAPI Specification</a></li>
        </ul>
      </body>
    </html>
    """

    return app


app = create_app()
