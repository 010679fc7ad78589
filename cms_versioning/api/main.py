import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from cms_versioning.adapters.clock import SystemClock
from cms_versioning.adapters.sqlite.migrator import SQLiteMigrator
from cms_versioning.adapters.sqlite.repos import SQLiteVersionRepo
from cms_versioning.api.deps import get_settings
from cms_versioning.app_shell.config import configure_logging, validate_ops_rules
from cms_versioning.components.scheduler import SchedulerPoller
from cms_versioning.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load rules (fail-fast), migrate the database, start the scheduler."""
    settings = get_settings()

    rules = load_rules(settings.rules_path)
    configure_logging(rules)
    validate_ops_rules(rules)
    logger.info("Rules loaded from %s", settings.rules_path)

    SQLiteMigrator(settings.db_path).run_migrations()

    poller: SchedulerPoller | None = None
    if rules.scheduling.enabled:
        poller = SchedulerPoller(
            SQLiteVersionRepo(settings.db_path),
            SystemClock(),
            poll_interval_seconds=rules.scheduling.poll_interval_seconds,
            max_versions=rules.scheduling.max_versions_per_scan,
        )
        poller.start()
    app.state.scheduler = poller

    yield

    if poller is not None:
        poller.stop()


app = FastAPI(
    title="CMS Versioning API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from cms_versioning.api.routes import (  # noqa: E402
    admin_blocks,
    admin_versions,
    public_content,
)

app.include_router(admin_versions.router, prefix="/api/v1/admin/cms", tags=["CMS Versions"])
app.include_router(admin_blocks.router, prefix="/api/v1/admin/cms", tags=["CMS Blocks"])
app.include_router(public_content.router, prefix="/api/v1/content", tags=["Content"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "cms-versioning"}
