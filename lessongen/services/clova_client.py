import json
import logging
import os
from dotenv import load_dotenv
import httpx

from lessongen.errors import GenerationError

load_dotenv()

logger = logging.getLogger(__name__)

CLOVA_API_KEY = os.getenv("CLOVA_API_KEY")
CLOVA_API_URL = os.getenv(
    "CLOVA_API_URL",
    "https://clovastudio.stream.ntruss.com/v3/chat-completions/HCX-007",
)
CLOVA_MAX_TOKENS = int(os.getenv("CLOVA_MAX_TOKENS", "4096"))
CLOVA_TEMPERATURE = float(os.getenv("CLOVA_TEMPERATURE", "0.5"))
CLOVA_TIMEOUT = float(os.getenv("CLOVA_TIMEOUT", "120"))

STRUCTURED_SYSTEM_PROMPT = (
    "You are a content generator that answers only with JSON.\n"
    "The JSON must conform to this JSON schema:\n"
    "{schema}\n"
    "Do not add explanations, markdown or text outside the JSON object."
)


def build_structured_payload(prompt_text: str, output_schema: dict) -> dict:
    schema_text = json.dumps(output_schema, ensure_ascii=False)
    messages = [
        {"role": "system", "content": STRUCTURED_SYSTEM_PROMPT.format(schema=schema_text)},
        {"role": "user", "content": prompt_text},
    ]
    return {
        "messages": messages,
        "topP": 0.8,
        "topK": 0,
        "temperature": CLOVA_TEMPERATURE,
        "maxCompletionTokens": CLOVA_MAX_TOKENS,
        "repetitionPenalty": 1.1,
        "stop": [],
        "includeAiFilters": False,
        # 출력 구조 강제
        "responseFormat": {"type": "json", "schema": output_schema},
    }


async def call_clova_structured(
    prompt_text: str,
    output_schema: dict,
    *,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    렌더링된 프롬프트 + 출력 스키마로 한 번 호출하고 모델 응답 텍스트를 반환
    - 재시도/캐시 없음
    - HTTP/전송 오류, 응답 포맷 이상은 GenerationError
    """
    headers = {
        "Authorization": f"Bearer {CLOVA_API_KEY}",
        "Content-Type": "application/json"
    }
    payload = build_structured_payload(prompt_text, output_schema)

    logger.debug("Calling CLOVA Studio: %s", CLOVA_API_URL)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=CLOVA_TIMEOUT) as owned:
                response = await owned.post(CLOVA_API_URL, headers=headers, json=payload)
        else:
            response = await client.post(CLOVA_API_URL, headers=headers, json=payload)
        response.raise_for_status()
        return response.json()["result"]["message"]["content"]
    except httpx.HTTPError as e:
        raise GenerationError(f"CLOVA Studio request failed: {e}") from e
    except (KeyError, TypeError, ValueError) as e:
        raise GenerationError(f"Unexpected CLOVA Studio response: {e!r}") from e
