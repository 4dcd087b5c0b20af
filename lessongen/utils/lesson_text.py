from lessongen.schemas.lesson import Lesson


def lesson_to_text(lesson: Lesson) -> str:
    """
    구조화된 레슨을 개선 프롬프트에 넣을 평문으로 변환
    제목 / 소개 / 섹션(순서대로) / 요약
    """
    parts = [f"# {lesson.title}", "", "## Introduction", lesson.introduction.strip()]
    for section in lesson.sections:
        parts += ["", f"## {section.title}", section.content.strip()]
    parts += ["", "## Summary", lesson.summary.strip()]
    return "\n".join(parts)
