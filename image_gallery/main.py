from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging
from typing import Optional

from image_gallery.storage.dynamodb import DynamoDBService
from image_gallery.storage.s3 import S3Service
from image_gallery.storage.users import UserStore
from image_gallery.settings import Settings, settings as default_settings
from image_gallery.routers.image_service import router as image_router
from image_gallery.routers.auth import router as auth_router
from image_gallery.exceptions import add_exception_handlers

logging.basicConfig(level=default_settings.log_level)
log = logging.getLogger("image-gallery")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
        Async context manager for FastAPI application lifecycle events.
        Initializes and closes the S3 and DynamoDB handles for the application.
    """
    settings = app.state.settings
    # Initialize resources
    app.state.s3 = S3Service(settings)
    app.state.db = DynamoDBService(settings)
    app.state.users = UserStore(settings)
    log.info("Started (auth_required=%s)", settings.auth_required)
    yield
    # Cleanup resources
    app.state.s3.close()
    app.state.db.close()
    app.state.users.close()

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title=settings.app_title,
        lifespan=lifespan,
        description="Image Gallery Service",
    )
    app.state.settings = settings

    # Add exception handlers
    add_exception_handlers(app)

    # Session cookie carries the logged in username
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)

    # CORS - Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=['*'],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add the routers
    app.include_router(auth_router)
    app.include_router(image_router)

    # Check Health
    @app.get("/")
    def read_root():
        """
            Default end point
        """
        return "Image Gallery Service is running."

    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("image_gallery.main:app", host="0.0.0.0", port=8000, reload=True)
