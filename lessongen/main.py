import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lessongen.api import lessons, pages
from lessongen.services.session_store import registry

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # 종료 시 진행 중인 생성 요청 정리
    registry.close()


app = FastAPI(title="LessonGen", lifespan=lifespan)

app.include_router(lessons.router, prefix="/api/lessons")
app.include_router(pages.router)

@app.get("/health")
def health():
    return {"status": "ok"}
