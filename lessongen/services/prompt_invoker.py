from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from lessongen.errors import GenerationError, ValidationError
from lessongen.services.clova_client import call_clova_structured
from lessongen.services.output_parser import ParseFailure, parse_output
from lessongen.services.prompt_builder import render_template, template_fields

logger = logging.getLogger(__name__)

In = TypeVar("In", bound=BaseModel)
Out = TypeVar("Out", bound=BaseModel)

# (렌더링된 프롬프트, 출력 JSON 스키마) → 모델 응답 텍스트
Provider = Callable[[str, dict], Awaitable[str]]


class StructuredPrompt(Generic[In, Out]):
    """
    프롬프트 템플릿 + 입력/출력 스키마 묶음
    - 입력 검증 실패 → ValidationError (호출 전)
    - 호출 실패, 스키마 불일치, 빈 응답 → GenerationError
    """

    def __init__(
        self,
        *,
        name: str,
        input_model: Type[In],
        output_model: Type[Out],
        template: str,
        provider: Optional[Provider] = None,
    ):
        unknown = template_fields(template) - set(input_model.model_fields)
        if unknown:
            raise ValueError(f"{name}: template uses unknown fields {sorted(unknown)}")
        self.name = name
        self.input_model = input_model
        self.output_model = output_model
        self.template = template
        self.provider = provider

    @property
    def output_schema(self) -> dict:
        return self.output_model.model_json_schema(by_alias=True)

    def validate_input(self, payload: In | Mapping[str, Any]) -> In:
        if isinstance(payload, self.input_model):
            data = payload.model_dump()
        else:
            data = payload
        try:
            return self.input_model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"{self.name}: invalid input: {e}") from e

    def render(self, payload: In | Mapping[str, Any]) -> str:
        validated = self.validate_input(payload)
        return render_template(self.template, validated.model_dump())

    async def __call__(
        self,
        payload: In | Mapping[str, Any],
        provider: Optional[Provider] = None,
    ) -> Out:
        prompt_text = self.render(payload)
        call = provider or self.provider or call_clova_structured

        logger.debug("%s: invoking provider", self.name)
        try:
            raw = await call(prompt_text, self.output_schema)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{self.name}: provider call failed: {e}") from e

        result = parse_output(raw, self.output_model)
        if isinstance(result, ParseFailure):
            raise GenerationError(f"{self.name}: {result.reason}")
        return result.value
