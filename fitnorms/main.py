import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from sqlalchemy.orm import Session

from fitnorms.database import Base, engine, LOG_LEVEL
from fitnorms import models  # noqa: F401  (регистрация таблиц)
from fitnorms.routers import grading as grading_router, instances as instances_router, reports as reports_router
from fitnorms.utils.template_loader import import_all

# Логирование
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=LOG_LEVEL,
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    Base.metadata.create_all(bind=engine)

    # Синхронизируем каталог шаблонов нормативов (отключается FITNORMS_IMPORT_CATALOG=0)
    if os.getenv("FITNORMS_IMPORT_CATALOG", "1") != "0":
        with Session(engine) as db:
            result = import_all(db)
            if result["errors"]:
                logger.warning("Шаблоны с ошибками: {}", list(result["errors"]))
    yield


app = FastAPI(title="Нормативы: оценки и прогресс", lifespan=lifespan)

app.include_router(grading_router.router)
app.include_router(instances_router.router)
app.include_router(reports_router.router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fitnorms.main:app", host="127.0.0.1", port=8000, reload=True)
