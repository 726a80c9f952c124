import asyncio
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates

from roster.core.config import get_settings
from roster.core.logging import get_logger
from roster.repositories.json_storage import MemberStorage
from roster.routers import members as members_router
from roster.services.editor_service import MemberEditor
from roster.services.member_service import MemberStore, default_storage
from roster.services.photo_service import PhotoEncoder

logger = get_logger("roster.app")

BASE = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(BASE, "templates")


@asynccontextmanager
async def lifespan(application: FastAPI):
    yield
    editor = getattr(application.state, "editor", None)
    if editor:
        editor.close()


def create_app(storage: MemberStorage | None = None) -> FastAPI:
    """Build the app; the member collection is loaded once, here."""
    settings = get_settings()
    app = FastAPI(title="Member Roster", lifespan=lifespan)

    templates = Jinja2Templates(directory=TEMPLATES_DIR)
    app.state.templates = templates

    store = MemberStore.open(storage or default_storage(settings))
    app.state.store = store
    app.state.editor = MemberEditor(
        store,
        PhotoEncoder(settings.max_upload_bytes),
        require_photo=settings.require_photo_on_create,
    )
    app.state.editor_lock = asyncio.Lock()
    logger.info("Loaded %d members", len(store))

    @app.exception_handler(Exception)
    async def crash_boundary(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return templates.TemplateResponse(
            request, "error.html", {"message": str(exc)}, status_code=500
        )

    @app.get("/health", tags=["ops"])
    def health():
        return {"status": "ok", "members": len(store)}

    app.include_router(members_router.router)
    return app
