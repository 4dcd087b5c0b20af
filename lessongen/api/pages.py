from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from lessongen.api.deps import get_tracker, new_page_tracker
from lessongen.services.lesson_tracker import LessonTracker
from lessongen.utils.html_builder import render_history, render_index, render_lesson

router = APIRouter()

# 문자열을 반환해야 세션 쿠키 헤더가 응답에 합쳐진다


@router.get("/", response_class=HTMLResponse)
async def index(tracker: LessonTracker = Depends(new_page_tracker)):
    return render_index(tracker.records, topic=tracker.topic, is_loading=tracker.is_loading)


@router.get("/partials/history", response_class=HTMLResponse)
async def history_fragment(tracker: LessonTracker = Depends(get_tracker)):
    return render_history(tracker.records)


@router.get("/lessons/{record_id}", response_class=HTMLResponse)
async def lesson_detail(record_id: str, tracker: LessonTracker = Depends(get_tracker)):
    record = tracker.get(record_id)
    if record is None or record.status != "generated" or record.lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return render_lesson(record.lesson)
