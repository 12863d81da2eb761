import logging
import sqlite3
from contextlib import asynccontextmanager
from fastapi import FastAPI

from app.config import settings
from app.routers import adverts

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create or migrate the schema, then integrity-check it
    try:
        from app.database import init_db
        from app.utils.filesystem import ensure_data_dir
        ensure_data_dir()
        init_db(settings.db_path)
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except (OSError, sqlite3.Error) as exc:
        logger.error("Could not run startup migration/integrity check: %s", exc)
    yield


app = FastAPI(
    title="Job Adverts",
    description="Job advert listings with time-windowed lifecycle actions",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(adverts.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


def run():
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    run()
