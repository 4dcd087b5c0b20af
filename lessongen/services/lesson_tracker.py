# ------------------------------------------------------------
# 세션별 레슨 생성 요청 추적
# - 상태: pending → generated | failed (종료 상태, 이후 변경 없음)
# - 기록은 최신순, 메모리에만 보관 (재시작 시 사라짐)
# - 요청마다 독립된 asyncio Task. 기록은 자기 Task만 변경하므로 락 없음
# ------------------------------------------------------------

from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Set

from lessongen.errors import GenerationError, ValidationError
from lessongen.schemas.lesson import (
    GeneratedLessonRecord,
    GenerateLessonOutput,
    ImproveLessonOutput,
    ImproveLessonRequest,
    Notification,
)
from lessongen.services.lesson_flows import generate_lesson, improve_lesson_with_feedback
from lessongen.utils.lesson_text import lesson_to_text

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS = 50

GenerateFn = Callable[[str], Awaitable[Optional[GenerateLessonOutput]]]
ImproveFn = Callable[[ImproveLessonRequest], Awaitable[ImproveLessonOutput]]

EMPTY_TOPIC_NOTICE = Notification(
    title="Error",
    description="Please enter a topic.",
    variant="destructive",
)
GENERATION_FAILED_NOTICE = Notification(
    title="Failed to generate lesson",
    description="An error occurred while generating the lesson. Please try again.",
    variant="destructive",
)


async def _default_generate(topic: str) -> GenerateLessonOutput:
    return await generate_lesson({"topic": topic})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LessonTracker:
    def __init__(
        self,
        generate: Optional[GenerateFn] = None,
        improve: Optional[ImproveFn] = None,
        *,
        max_in_flight: Optional[int] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        max_in_flight, timeout: 기본값 None = 동시 요청 수/대기 시간 제한 없음
        """
        self.topic = ""  # 입력창 값
        self._generate = generate or _default_generate
        self._improve = improve or improve_lesson_with_feedback
        self._timeout = timeout
        self._semaphore = asyncio.Semaphore(max_in_flight) if max_in_flight else None
        self._clock = clock
        self._records: List[GeneratedLessonRecord] = []
        self._by_id: Dict[str, GeneratedLessonRecord] = {}
        # 화면이 가져가지 않은 알림은 최근 MAX_NOTIFICATIONS개만 보관
        self._notifications: Deque[Notification] = deque(maxlen=MAX_NOTIFICATIONS)
        self._tasks: Set[asyncio.Task] = set()

    # -------------------- 조회 --------------------

    @property
    def records(self) -> List[GeneratedLessonRecord]:
        """최신순 기록 (복사본)"""
        return list(self._records)

    @property
    def is_loading(self) -> bool:
        return any(r.status == "pending" for r in self._records)

    def get(self, record_id: str) -> Optional[GeneratedLessonRecord]:
        return self._by_id.get(record_id)

    def drain_notifications(self) -> List[Notification]:
        items = list(self._notifications)
        self._notifications.clear()
        return items

    # -------------------- 입력 / 제출 --------------------

    def set_topic(self, topic: str) -> None:
        self.topic = topic

    def submit(self, topic: Optional[str] = None) -> Optional[GeneratedLessonRecord]:
        """
        주제 제출
        - 공백뿐이면 알림만 남기고 None (기록 생성 없음)
        - 아니면 pending 기록을 맨 앞에 추가, 입력창 비우고 생성 시작
        실행 중인 이벤트 루프 안에서 호출해야 한다
        """
        value = self.topic if topic is None else topic
        if not value.strip():
            self._notify(EMPTY_TOPIC_NOTICE)
            return None

        record = GeneratedLessonRecord(id=self._new_id(), topic=value)
        self._records.insert(0, record)
        self._by_id[record.id] = record
        self.topic = ""
        logger.info("Lesson requested: id=%s topic=%r", record.id, record.topic)

        task = asyncio.create_task(self._run(record), name=f"lesson-{record.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return record

    async def join(self) -> None:
        """진행 중인 생성 요청이 모두 끝날 때까지 대기"""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        # 앱 종료 시에만 사용. 화면에서 취소하는 기능은 없음
        for task in list(self._tasks):
            task.cancel()

    # -------------------- 개선 --------------------

    async def improve(self, record_id: str, feedback: str) -> ImproveLessonOutput:
        record = self.get(record_id)
        if record is None:
            raise LookupError(record_id)
        if record.status != "generated" or record.lesson is None:
            raise ValidationError(f"Lesson {record_id} has not been generated.")
        request = ImproveLessonRequest(lesson=lesson_to_text(record.lesson), feedback=feedback)
        return await self._improve(request)

    # -------------------- 내부 --------------------

    def _new_id(self) -> str:
        base = self._clock().isoformat()
        candidate, n = base, 1
        while candidate in self._by_id:
            candidate = f"{base}-{n}"
            n += 1
        return candidate

    def _notify(self, notification: Notification) -> None:
        self._notifications.append(notification)

    async def _generate_once(self, topic: str) -> Optional[GenerateLessonOutput]:
        # 코루틴은 실제로 await할 때 만든다
        if self._timeout is None:
            return await self._generate(topic)
        return await asyncio.wait_for(self._generate(topic), self._timeout)

    async def _call_generate(self, topic: str) -> Optional[GenerateLessonOutput]:
        if self._semaphore is None:
            return await self._generate_once(topic)
        async with self._semaphore:
            return await self._generate_once(topic)

    async def _run(self, record: GeneratedLessonRecord) -> None:
        try:
            result = await self._call_generate(record.topic)
            if result is None or result.lesson is None or result.lesson.is_empty():
                raise GenerationError("The generated lesson was empty.")
        except Exception:
            # 실패는 여기서 모두 흡수: 기록은 failed, 알림 1건
            logger.exception("Lesson generation failed: id=%s topic=%r", record.id, record.topic)
            if record.mark_failed():
                self._notify(GENERATION_FAILED_NOTICE)
            return

        if record.mark_generated(result.lesson):
            logger.info("Lesson generated: id=%s sections=%d", record.id, len(result.lesson.sections))
