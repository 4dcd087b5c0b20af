"""Tests for prompt rendering, output parsing and the structured prompt invoker."""

import asyncio
import json

import pytest

from lessongen.errors import GenerationError, ValidationError
from lessongen.schemas.lesson import GenerateLessonOutput, GenerateLessonRequest, ImproveLessonOutput
from lessongen.services.lesson_flows import (
    generate_lesson,
    generate_lesson_prompt,
    improve_lesson_with_feedback,
)
from lessongen.services.output_parser import ParseFailure, Parsed, parse_output
from lessongen.services.prompt_builder import (
    GENERATE_LESSON_TEMPLATE,
    IMPROVE_LESSON_TEMPLATE,
    render_template,
    template_fields,
)
from lessongen.services.prompt_invoker import StructuredPrompt


class FakeProvider:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def __call__(self, prompt_text, output_schema):
        self.calls.append((prompt_text, output_schema))
        if self.error is not None:
            raise self.error
        return self.reply


class TestRenderTemplate:

    def test_triple_and_double_braces(self):
        assert render_template("a {{{x}}} b {{y}}", {"x": "1", "y": "<2>"}) == "a 1 b <2>"

    @pytest.mark.parametrize("template", ["{{{topic}}", "{{topic}}}", "{{{{topic}}}}"])
    def test_mismatched_braces_left_alone(self, template):
        assert render_template(template, {"topic": "x"}) == template
        assert template_fields(template) == set()

    def test_adjacent_placeholders(self):
        assert render_template("{{{a}}}{{b}}", {"a": "1", "b": "2"}) == "12"

    def test_missing_value(self):
        with pytest.raises(ValueError):
            render_template("{{{topic}}}", {})

    def test_builtin_template_fields(self):
        assert template_fields(GENERATE_LESSON_TEMPLATE) == {"topic"}
        assert template_fields(IMPROVE_LESSON_TEMPLATE) == {"lesson", "feedback"}

    def test_generate_prompt_text(self):
        text = generate_lesson_prompt.render({"topic": "Photosynthesis"})
        assert "Generate a lesson about the following topic: Photosynthesis" in text
        assert "{{" not in text


class TestParseOutput:
    """Provider text is never trusted until it parses into the schema."""

    def test_plain_json(self, lesson_data):
        result = parse_output(json.dumps({"lesson": lesson_data}), GenerateLessonOutput)
        assert isinstance(result, Parsed)
        assert result.ok
        assert result.value.lesson.title == "Photosynthesis"

    def test_fenced_json(self, lesson_data):
        raw = "```json\n" + json.dumps({"lesson": lesson_data}) + "\n```"
        result = parse_output(raw, GenerateLessonOutput)
        assert isinstance(result, Parsed)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw):
        result = parse_output(raw, GenerateLessonOutput)
        assert isinstance(result, ParseFailure)
        assert not result.ok
        assert result.reason == "empty response"

    def test_not_json(self):
        result = parse_output("Here is your lesson!", GenerateLessonOutput)
        assert isinstance(result, ParseFailure)
        assert "not valid JSON" in result.reason

    def test_not_an_object(self):
        result = parse_output("[1, 2]", GenerateLessonOutput)
        assert isinstance(result, ParseFailure)

    def test_schema_mismatch(self):
        result = parse_output('{"lesson": {"title": "only a title"}}', GenerateLessonOutput)
        assert isinstance(result, ParseFailure)
        assert "GenerateLessonOutput" in result.reason


class TestStructuredPrompt:

    def test_unknown_template_field_rejected(self):
        with pytest.raises(ValueError):
            StructuredPrompt(
                name="bad",
                input_model=GenerateLessonRequest,
                output_model=GenerateLessonOutput,
                template="{{{subject}}}",
            )

    def test_generate_lesson(self, lesson_data, lesson):
        provider = FakeProvider(reply=json.dumps({"lesson": lesson_data}))
        out = asyncio.run(generate_lesson({"topic": "Photosynthesis"}, provider=provider))

        assert out.lesson == lesson
        assert len(provider.calls) == 1
        prompt_text, schema = provider.calls[0]
        assert "Photosynthesis" in prompt_text
        assert "lesson" in schema["properties"]

    def test_accepts_model_payload(self, lesson_data):
        provider = FakeProvider(reply=json.dumps({"lesson": lesson_data}))
        out = asyncio.run(generate_lesson(GenerateLessonRequest(topic="X"), provider=provider))
        assert out.lesson.title == "Photosynthesis"

    @pytest.mark.parametrize("topic", ["", "   "])
    def test_blank_topic_fails_before_call(self, topic):
        provider = FakeProvider(reply="{}")
        with pytest.raises(ValidationError):
            asyncio.run(generate_lesson({"topic": topic}, provider=provider))
        assert provider.calls == []

    def test_missing_input_field_fails_before_call(self):
        provider = FakeProvider(reply="{}")
        with pytest.raises(ValidationError):
            asyncio.run(improve_lesson_with_feedback({"lesson": "text"}, provider=provider))
        assert provider.calls == []

    def test_empty_reply_is_generation_error(self):
        provider = FakeProvider(reply="")
        with pytest.raises(GenerationError):
            asyncio.run(generate_lesson({"topic": "X"}, provider=provider))

    def test_malformed_reply_is_generation_error(self):
        provider = FakeProvider(reply='{"lesson": null}')
        with pytest.raises(GenerationError):
            asyncio.run(generate_lesson({"topic": "X"}, provider=provider))

    def test_provider_exception_is_generation_error(self):
        provider = FakeProvider(error=RuntimeError("connection reset"))
        with pytest.raises(GenerationError) as exc_info:
            asyncio.run(generate_lesson({"topic": "X"}, provider=provider))
        assert "connection reset" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_improve_lesson(self):
        provider = FakeProvider(reply='{"improvedLesson": "A clearer lesson."}')
        out = asyncio.run(improve_lesson_with_feedback(
            {"lesson": "Old lesson", "feedback": "Add an example"},
            provider=provider,
        ))

        assert isinstance(out, ImproveLessonOutput)
        assert out.improved_lesson == "A clearer lesson."
        prompt_text, schema = provider.calls[0]
        assert "Old lesson" in prompt_text
        assert "Add an example" in prompt_text
        assert "improvedLesson" in schema["properties"]
