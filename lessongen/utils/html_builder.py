from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from lessongen.schemas.lesson import GeneratedLessonRecord, Lesson

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

# 입력창 아래 예시
TOPIC_EXAMPLES = [
    "A one-pager on how to divide with long division",
    "An explanation of how the Cartesian Grid works and an example of finding distances between points",
    "A test on counting numbers",
]

# 상태 → 배지 스타일
BADGE_VARIANTS = {
    "generated": "default",
    "failed": "destructive",
    "pending": "secondary",
}

_env: Environment | None = None


def _get_jinja_env() -> Environment:
    global _env
    if _env is None:
        # 주제/레슨 내용은 사용자·모델 입력이므로 항상 이스케이프
        _env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "j2"]),
        )
        _env.globals["badge_variants"] = BADGE_VARIANTS
    return _env


def render_history(records: list[GeneratedLessonRecord]) -> str:
    return _get_jinja_env().get_template("history.html.j2").render(records=records)


def render_index(records: list[GeneratedLessonRecord], topic: str = "", is_loading: bool = False) -> str:
    return _get_jinja_env().get_template("index.html.j2").render(
        records=records,
        topic=topic,
        is_loading=is_loading,
        examples=TOPIC_EXAMPLES,
    )


def render_lesson(lesson: Lesson) -> str:
    return _get_jinja_env().get_template("lesson.html.j2").render(lesson=lesson)
