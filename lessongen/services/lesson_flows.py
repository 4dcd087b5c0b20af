from __future__ import annotations
from typing import Any, Mapping, Optional

from lessongen.schemas.lesson import (
    GenerateLessonRequest,
    GenerateLessonOutput,
    ImproveLessonRequest,
    ImproveLessonOutput,
)
from lessongen.services.prompt_builder import GENERATE_LESSON_TEMPLATE, IMPROVE_LESSON_TEMPLATE
from lessongen.services.prompt_invoker import Provider, StructuredPrompt

generate_lesson_prompt = StructuredPrompt(
    name="generateLessonPrompt",
    input_model=GenerateLessonRequest,
    output_model=GenerateLessonOutput,
    template=GENERATE_LESSON_TEMPLATE,
)

improve_lesson_prompt = StructuredPrompt(
    name="improveLessonWithFeedbackPrompt",
    input_model=ImproveLessonRequest,
    output_model=ImproveLessonOutput,
    template=IMPROVE_LESSON_TEMPLATE,
)


# 주제 → 레슨
async def generate_lesson(
    payload: GenerateLessonRequest | Mapping[str, Any],
    provider: Optional[Provider] = None,
) -> GenerateLessonOutput:
    return await generate_lesson_prompt(payload, provider=provider)


# (레슨 텍스트, 피드백) → 개선된 레슨 텍스트
async def improve_lesson_with_feedback(
    payload: ImproveLessonRequest | Mapping[str, Any],
    provider: Optional[Provider] = None,
) -> ImproveLessonOutput:
    return await improve_lesson_prompt(payload, provider=provider)
