from types import SimpleNamespace

import openai
import pytest

from convertia.ai_engine.service import AIEngine
from convertia.core.exceptions import AIEngineError


class StubCompletions:
    def __init__(self, content=None, error=None, choices=True):
        self.content = content
        self.error = error
        self.choices = choices
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def engine_with(completions):
    return AIEngine(client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))


def test_without_client_raises():
    engine = AIEngine(client=None, api_key=None)

    assert engine.available is False
    with pytest.raises(AIEngineError):
        engine.chat_completion([{"role": "user", "content": "Hola"}])


def test_returns_reply_text_and_passes_options():
    completions = StubCompletions(content="Buenas tardes")

    reply = engine_with(completions).chat_completion(
        [{"role": "user", "content": "Hola"}], temperature=0.2, max_tokens=50
    )

    assert reply == "Buenas tardes"
    assert completions.kwargs["temperature"] == 0.2
    assert completions.kwargs["max_tokens"] == 50


def test_upstream_error_is_wrapped():
    completions = StubCompletions(error=openai.OpenAIError("quota exceeded"))

    with pytest.raises(AIEngineError) as excinfo:
        engine_with(completions).chat_completion([{"role": "user", "content": "Hola"}])

    assert excinfo.value.message == "OpenAI error: quota exceeded"


def test_empty_choices_are_invalid():
    with pytest.raises(AIEngineError, match="Invalid OpenAI response"):
        engine_with(StubCompletions(choices=False)).chat_completion([{"role": "user", "content": "Hola"}])


def test_analyze_resume_reads_compatibility():
    completions = StubCompletions(content="7. Compatibilidad con la Vacante: **140** - Sobrado")

    result = engine_with(completions).analyze_resume("CV", "Ventas")

    assert result["compatibility"] == 100
    assert "Ventas" in completions.kwargs["messages"][0]["content"]
