import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from doccollab.api.http import (
    health_router, documents_router, access_router, versions_router,
    export_router, collaboration_router, folders_router
)
from doccollab.core.config import settings
from doccollab.core.db import create_tables
from doccollab.core.errors import DocCollabError
from doccollab.maintenance import maintenance_loop

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()

    maintenance_task = None
    if settings.maintenance_interval_seconds > 0:
        maintenance_task = asyncio.create_task(maintenance_loop(settings.maintenance_interval_seconds))

    logger.info("DocCollab started")
    yield

    if maintenance_task is not None:
        maintenance_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await maintenance_task
    logger.info("DocCollab stopped")


app = FastAPI(
    title="DocCollab",
    description="Права доступа, история версий и экспорт документов для совместного редактора",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocCollabError)
async def doccollab_error_handler(request: Request, exc: DocCollabError):
    """Доменные ошибки в виде {"code": ..., "message": ...}"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Подключаем роутеры
app.include_router(health_router)
app.include_router(documents_router)
app.include_router(access_router)
app.include_router(versions_router)
app.include_router(export_router)
app.include_router(collaboration_router)
app.include_router(folders_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "DocCollab API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
