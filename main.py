# permmap - read-only HTTP surface over the permission mapping table
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config import Settings, get_settings
from permmap import AuditLog, build_mapping_table, load_schema_document
from permmap.resources import Taxonomy
from server.endpoints import router as permissions_router

log = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Table must be fully validated before the first request is served
        document = load_schema_document(settings.schema_path)
        table = build_mapping_table(Taxonomy.from_document(document), document.decisions)
        app.state.mapping_table = table
        app.state.audit_log = AuditLog(settings.audit_log_path, memory_limit=settings.audit_memory_limit)
        log.info("Serving permission table %s from %s", table.digest(), settings.schema_path)
        yield

    app = FastAPI(
        title="permmap",
        description="Static resource/field permission mapping lookups",
        lifespan=lifespan,
    )
    app.include_router(permissions_router)

    @app.get("/")
    async def index():
        return {"message": "permmap - see /api/permissions"}

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = os.environ.get("UVICORN_HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run("main:app", host=host, port=port, reload=False)
