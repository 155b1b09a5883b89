"""
AI engine service wrapping the OpenAI chat-completion API
"""
import re
from typing import Dict, List, Any, Optional

import openai
import structlog

from convertia.core.config import settings
from convertia.core.exceptions import AIEngineError

logger = structlog.get_logger()

CV_ANALYSIS_PROMPT = """Eres un asistente experto en recursos humanos especializado en análisis de CVs.
Tu tarea es analizar el contenido del CV proporcionado y dar una evaluación detallada.

Si hay requisitos del trabajo disponibles, evalúa qué tan bien el candidato cumple estos requisitos en una escala del 1 al 100, y explica las razones.

IMPORTANTE: NO DEBES RESPONDER que no tienes acceso al CV o que no puedes ver el documento. Analiza únicamente la información proporcionada en el texto. Si la información es limitada, hazlo saber pero proporciona el mejor análisis posible con lo disponible.

Estructura tu respuesta en las siguientes secciones:
1. Resumen de Antecedentes Profesionales
2. Habilidades y Competencias Clave
3. Educación y Certificaciones
4. Fortalezas
5. Áreas de Mejora
6. Evaluación General
7. Compatibilidad con la Vacante: [PUNTUACIÓN] - Razones

Contexto (requisitos del trabajo): {context}"""

COMPATIBILITY_PATTERN = re.compile(r"Compatibilidad con la Vacante[^:\n]*:\s*\**\s*(\d{1,3})", re.IGNORECASE)


class AIEngine:
    """Chat-completion client used by the training simulator and CV analysis"""

    def __init__(self, api_key: Optional[str] = None, client: Optional[Any] = None):
        self.client = client
        if self.client is None:
            api_key = api_key or settings.OPENAI_API_KEY
            if api_key:
                try:
                    options = {"api_key": api_key}
                    if settings.OPENAI_TIMEOUT_SECONDS:
                        options["timeout"] = settings.OPENAI_TIMEOUT_SECONDS
                    self.client = openai.OpenAI(**options)
                    logger.info("openai_client_initialized", model=settings.OPENAI_MODEL)
                except Exception as e:
                    logger.warning("openai_client_init_failed", error=str(e))
        if self.client is None:
            logger.warning("openai_client_unavailable")

    @property
    def available(self) -> bool:
        return self.client is not None

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Run one non-streaming chat completion and return the reply text.
        Raises AIEngineError with the upstream message on any failure.
        """
        if not self.client:
            raise AIEngineError("OpenAI API key is not configured")

        try:
            response = self.client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                temperature=settings.AI_TEMPERATURE if temperature is None else temperature,
                max_tokens=max_tokens or settings.TRAINING_CHAT_MAX_TOKENS,
            )
        except openai.OpenAIError as e:
            logger.error("openai_request_failed", error=str(e))
            raise AIEngineError(f"OpenAI error: {e}")

        if not response.choices:
            logger.error("openai_invalid_response")
            raise AIEngineError("Invalid OpenAI response")

        content = response.choices[0].message.content
        if not content:
            raise AIEngineError("Empty OpenAI response")
        return content

    def analyze_resume(self, resume_text: str, requirements: Optional[str] = None) -> Dict[str, Any]:
        """
        Analyse a CV against job requirements.
        Returns {"text": raw analysis, "compatibility": 0-100 or None}
        """
        text = self.chat_completion(
            [
                {
                    "role": "system",
                    "content": CV_ANALYSIS_PROMPT.format(context=requirements or "No proporcionados"),
                },
                {"role": "user", "content": resume_text},
            ],
            max_tokens=settings.RESUME_ANALYSIS_MAX_TOKENS,
        )

        compatibility = None
        match = COMPATIBILITY_PATTERN.search(text)
        if match:
            compatibility = float(min(int(match.group(1)), 100))

        return {"text": text, "compatibility": compatibility}


ai_engine = AIEngine()


def get_ai_engine() -> AIEngine:
    """Dependency returning the shared AI engine"""
    return ai_engine
