from fastapi import Depends, Request, Response

from lessongen.services.lesson_tracker import LessonTracker
from lessongen.services.session_store import SESSION_COOKIE, SessionRegistry, get_registry


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")


def get_tracker(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
) -> LessonTracker:
    # 쿠키가 없으면 새 세션 발급
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = registry.new_session_id()
        _set_session_cookie(response, session_id)
    return registry.get_or_create(session_id)


def new_page_tracker(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
) -> LessonTracker:
    # 페이지를 새로 열면 이전 기록은 버리고 새 세션으로 시작
    session_id, tracker = registry.start_page(request.cookies.get(SESSION_COOKIE))
    _set_session_cookie(response, session_id)
    return tracker
