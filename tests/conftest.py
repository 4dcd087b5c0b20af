import pytest

from lessongen.schemas.lesson import Lesson


LESSON_DATA = {
    "title": "Photosynthesis",
    "introduction": "Plants turn light into chemical energy.",
    "sections": [
        {"title": "Overview", "content": "Light, water and carbon dioxide become glucose and oxygen."},
        {"title": "Chlorophyll", "content": "The pigment that absorbs light."},
    ],
    "summary": "Photosynthesis feeds almost every food chain.",
}


@pytest.fixture
def lesson_data() -> dict:
    return {**LESSON_DATA, "sections": [dict(s) for s in LESSON_DATA["sections"]]}


@pytest.fixture
def lesson(lesson_data) -> Lesson:
    return Lesson.model_validate(lesson_data)
