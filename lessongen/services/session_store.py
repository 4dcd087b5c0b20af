import logging
import secrets
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from lessongen.services.lesson_tracker import LessonTracker

logger = logging.getLogger(__name__)

SESSION_COOKIE = "lessongen_session"
MAX_SESSIONS = 1000


class SessionRegistry:
    """
    페이지 로드 1회 = 세션 1개 → LessonTracker
    - 새로고침하면 이전 세션은 버려진다 (기록 유지 안 함)
    - 최대 max_sessions개, 넘으면 가장 오래 안 쓴 세션부터 제거
    프로세스 메모리에만 존재. 영속화 없음
    """

    def __init__(
        self,
        tracker_factory: Callable[[], LessonTracker] = LessonTracker,
        max_sessions: int = MAX_SESSIONS,
    ):
        self._factory = tracker_factory
        self._max_sessions = max_sessions
        self._trackers: "OrderedDict[str, LessonTracker]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._trackers)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._trackers

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_hex(16)

    def get(self, session_id: Optional[str]) -> Optional[LessonTracker]:
        if not session_id:
            return None
        return self._trackers.get(session_id)

    def get_or_create(self, session_id: str) -> LessonTracker:
        tracker = self._trackers.get(session_id)
        if tracker is not None:
            self._trackers.move_to_end(session_id)
            return tracker

        tracker = self._factory()
        self._trackers[session_id] = tracker
        logger.info("New session: %s", session_id[:8])
        while len(self._trackers) > self._max_sessions:
            evicted, _ = self._trackers.popitem(last=False)
            logger.info("Session evicted: %s", evicted[:8])
        return tracker

    def discard(self, session_id: Optional[str]) -> bool:
        # 진행 중인 생성은 취소하지 않고 끝나게 둔다. 결과는 버려짐
        if not session_id:
            return False
        return self._trackers.pop(session_id, None) is not None

    def start_page(self, previous_session_id: Optional[str]) -> Tuple[str, LessonTracker]:
        """페이지 로드마다 새 세션. 이전 세션의 기록은 사라진다"""
        if self.discard(previous_session_id):
            logger.info("Session replaced by page load: %s", previous_session_id[:8])
        session_id = self.new_session_id()
        return session_id, self.get_or_create(session_id)

    def close(self) -> None:
        for tracker in self._trackers.values():
            tracker.close()


registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return registry
