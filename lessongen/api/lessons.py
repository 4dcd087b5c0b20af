import logging

from fastapi import APIRouter, Depends, HTTPException

from lessongen.api.deps import get_tracker
from lessongen.errors import GenerationError, ValidationError
from lessongen.schemas.lesson import (
    GeneratedLessonRecord,
    HistoryResponse,
    ImproveLessonOutput,
    ImproveLessonRequest,
    ImproveRecordRequest,
    NotificationsResponse,
    SubmitTopicRequest,
)
from lessongen.services.lesson_flows import improve_lesson_with_feedback
from lessongen.services.lesson_tracker import EMPTY_TOPIC_NOTICE, LessonTracker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=GeneratedLessonRecord, status_code=201)
async def submit_topic(request: SubmitTopicRequest, tracker: LessonTracker = Depends(get_tracker)):
    """
    주제를 제출하고 pending 기록을 즉시 반환
    생성 결과는 GET /api/lessons/{id} 또는 목록으로 확인
    """
    tracker.set_topic(request.topic)
    record = tracker.submit()
    if record is None:
        raise HTTPException(status_code=422, detail=EMPTY_TOPIC_NOTICE.model_dump())
    return record


@router.get("", response_model=HistoryResponse)
async def list_history(tracker: LessonTracker = Depends(get_tracker)):
    return HistoryResponse(items=tracker.records, is_loading=tracker.is_loading)


@router.get("/notifications", response_model=NotificationsResponse)
async def pop_notifications(tracker: LessonTracker = Depends(get_tracker)):
    return NotificationsResponse(items=tracker.drain_notifications())


@router.post("/improve", response_model=ImproveLessonOutput)
async def improve_lesson(request: ImproveLessonRequest):
    try:
        return await improve_lesson_with_feedback(request)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except GenerationError as e:
        logger.exception("Lesson improvement failed")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{record_id}", response_model=GeneratedLessonRecord)
async def get_record(record_id: str, tracker: LessonTracker = Depends(get_tracker)):
    record = tracker.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return record


@router.post("/{record_id}/improve", response_model=ImproveLessonOutput)
async def improve_record(
    record_id: str,
    request: ImproveRecordRequest,
    tracker: LessonTracker = Depends(get_tracker),
):
    try:
        return await tracker.improve(record_id, request.feedback)
    except LookupError:
        raise HTTPException(status_code=404, detail="Lesson not found")
    except ValidationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except GenerationError as e:
        logger.exception("Lesson improvement failed: id=%s", record_id)
        raise HTTPException(status_code=500, detail=str(e))
