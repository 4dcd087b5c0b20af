# ------------------------------------------------------------
# 모델 응답 텍스트 → 출력 스키마 변환
# - 성공: Parsed(value)
# - 실패: ParseFailure(reason)
# 검증되지 않은 모델 응답은 그대로 쓰지 않는다
# ------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar, Union
import json
import re

from pydantic import BaseModel, ValidationError as PydanticValidationError

T = TypeVar("T", bound=BaseModel)

# ```json ... ``` 로 감싼 응답
_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*\n?(.*?)\n?```$", re.DOTALL)


@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    ok: bool = False


ParseResult = Union[Parsed[T], ParseFailure]


def _strip_fence(text: str) -> str:
    m = _FENCE_RE.match(text)
    return m.group(1).strip() if m else text


def parse_output(raw: Optional[str], model: Type[T]) -> ParseResult:
    if raw is None or not raw.strip():
        return ParseFailure("empty response")

    text = _strip_fence(raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return ParseFailure(f"response is not valid JSON: {e.msg}")

    if not isinstance(data, dict):
        return ParseFailure(f"expected a JSON object, got {type(data).__name__}")

    try:
        return Parsed(model.model_validate(data))
    except PydanticValidationError as e:
        return ParseFailure(f"response does not match {model.__name__}: {e.error_count()} error(s)")
