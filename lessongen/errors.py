class LessonGenError(Exception):
    """lessongen 공통 예외"""


class ValidationError(LessonGenError):
    """입력값이 스키마를 만족하지 않음 (네트워크 호출 전에 발생)"""


class GenerationError(LessonGenError):
    """모델 호출 실패, 또는 응답을 스키마로 변환할 수 없음"""
