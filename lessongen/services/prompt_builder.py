import re
from typing import Mapping

# {{{name}}} 또는 {{name}}. 여는/닫는 중괄호 개수가 같아야 한다
# 프롬프트이므로 둘 다 이스케이프 없이 치환
_NAME = r"\s*([A-Za-z_][A-Za-z0-9_]*)\s*"
_PLACEHOLDER_RE = re.compile(
    r"(?<!\{)\{\{\{" + _NAME + r"\}\}\}(?!\})"
    r"|(?<!\{)\{\{" + _NAME + r"\}\}(?!\})"
)


def _placeholder_name(match: re.Match) -> str:
    return match.group(1) or match.group(2)


# 주제 → 레슨 생성용 프롬프트
GENERATE_LESSON_TEMPLATE = (
    "You are a helpful assistant that creates lessons on any topic.\n\n"
    "Generate a lesson about the following topic: {{{topic}}}\n\n"
    "The lesson should be structured with a title, an introduction, "
    "multiple sections with titles and content, and a summary."
)


# 피드백 반영 레슨 개선용 프롬프트
IMPROVE_LESSON_TEMPLATE = (
    "You are an expert teacher who can improve lessons based on feedback.\n\n"
    "Here is the lesson to improve:\n"
    "{{lesson}}\n\n"
    "Here is the feedback to use to improve the lesson:\n"
    "{{feedback}}\n\n"
    "Improve the lesson based on the feedback. Return the improved lesson."
)


def template_fields(template: str) -> set[str]:
    return {_placeholder_name(m) for m in _PLACEHOLDER_RE.finditer(template)}


def render_template(template: str, values: Mapping[str, object]) -> str:
    """
    템플릿의 자리표시자를 values 값으로 치환
    - 값이 없는 자리표시자는 ValueError
    """
    def _sub(match: re.Match) -> str:
        name = _placeholder_name(match)
        if name not in values:
            raise ValueError(f"Missing value for placeholder: {name}")
        return str(values[name])

    return _PLACEHOLDER_RE.sub(_sub, template)
