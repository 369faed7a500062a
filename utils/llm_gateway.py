"""
Модуль: `utils/llm_gateway.py`.
Назначение: Вызов OpenAI-совместимого LLM-шлюза и извлечение JSON из ответа.
"""

import json
import re
import urllib.error
import urllib.request

from flask import current_app

from errors import UpstreamPaymentRequired, UpstreamRateLimited, UpstreamTransportFailure

JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def extract_json_object(content: str | None) -> dict:
    """Достаёт первый JSON-объект из текста модели (ответ может быть обёрнут в markdown)."""
    match = JSON_OBJECT_RE.search(content or "")
    if not match:
        raise UpstreamTransportFailure("Failed to parse AI response")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise UpstreamTransportFailure("Failed to parse AI response") from exc


def chat_completion(system_prompt: str, user_prompt: str, json_mode: bool = False) -> str:
    """Отправляет пару system/user сообщений и возвращает текст первого варианта."""
    cfg = current_app.config
    api_key = cfg.get("LLM_API_KEY", "").strip()
    if not api_key:
        raise UpstreamTransportFailure("LLM_API_KEY is not configured")

    body = {
        "model": cfg.get("LLM_MODEL"),
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}

    request = urllib.request.Request(
        cfg.get("LLM_GATEWAY_URL"),
        data=json.dumps(body).encode("utf-8"),
        headers={
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        },
        method="POST",
    )

    try:
        with urllib.request.urlopen(request, timeout=int(cfg.get("LLM_TIMEOUT", 30))) as response:
            data = json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as exc:
        if exc.code == 429:
            raise UpstreamRateLimited() from exc
        if exc.code == 402:
            raise UpstreamPaymentRequired() from exc
        current_app.logger.error("AI gateway error: %s %s", exc.code, exc.read()[:500])
        raise UpstreamTransportFailure(f"AI gateway error: {exc.code}") from exc
    except (urllib.error.URLError, TimeoutError, json.JSONDecodeError) as exc:
        current_app.logger.exception("AI gateway request failed")
        raise UpstreamTransportFailure("AI gateway error") from exc

    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamTransportFailure("Failed to parse AI response") from exc


def complete_json(system_prompt: str, user_prompt: str, json_mode: bool = False) -> dict:
    return extract_json_object(chat_completion(system_prompt, user_prompt, json_mode=json_mode))
