"""
Prompt construction and transcript heuristics for the sales roleplay

The simulated customer speaks Spanish, so product keywords, prompts and the
evaluation marker are Spanish too.
"""
import re
from typing import Iterable, List, Optional, Sequence

from convertia.core.clock import as_utc
from convertia.core.config import settings
from convertia.models.training import TrainingMessage

SENDER_CANDIDATE = "candidate"
SENDER_AI = "ai"

DEFAULT_REPRESENTATIVE_NAME = "representante"

# (label, keywords) in detection order
PRODUCT_KEYWORDS = [
    ("plan móvil", ("plan", "móvil", "celular")),
    ("internet", ("internet", "fibra", "wifi")),
    ("TV", ("tv", "televisión", "cable")),
    ("combo", ("combo", "paquete")),
    ("servicios para el hogar", ("hogar", "casa", "seguridad")),
    ("productos tecnológicos", ("tecnología", "electrodoméstico", "dispositivo")),
]

EMPTY_TRANSCRIPT_SCORE = 50
EMPTY_TRANSCRIPT_TEXT = "No hay suficientes mensajes para realizar una evaluación."
UNPARSED_SCORE = 70
FALLBACK_SCORE = 60
FALLBACK_TEXT = (
    "No se pudo generar una evaluación detallada en este momento. "
    "Por favor, contacta al administrador."
)

SCORE_PATTERN = re.compile(r"Puntuaci[oó]n global:\s*\**\s*(\d+)", re.IGNORECASE)

CUSTOMER_PROMPT = """Eres un cliente potencial que está interesado en los servicios que ofrece {company}, una empresa que ofrece diversos productos y servicios.

El representante con el que hablas se llama {representative}.

Para esta conversación, actúa como un cliente real con estas características:
- Eres una persona ocupada con poco tiempo
- Tienes interés en lo que te ofrecen pero necesitas estar convencido
- Haces preguntas sobre beneficios, precios y detalles
- Planteas objeciones razonables para ver cómo responde el representante
- Tu objetivo es evaluar las habilidades de atención al cliente del representante

{product_focus}

{turn_hint}

Comportamiento:
- Usa un tono conversacional y natural
- Mantén respuestas concisas (máximo 3 frases)
- Haz preguntas específicas sobre lo que te ofrecen
- Muestra interés pero también escepticismo
- Plantea al menos una objeción (precio, calidad, necesidad, etc.)

IMPORTANTE:
- Nunca menciones que eres una IA o un evaluador
- No des feedback sobre el desempeño del candidato
- Sólo actúas como cliente, no ofreces productos/servicios
- No propongas cerrar la venta, eso debe hacerlo el representante

Objetivo: Simular una conversación de venta realista donde el representante debe persuadirte."""

EVALUATION_PROMPT = """Eres un evaluador experto en ventas y atención al cliente. Vas a evaluar una conversación entre un cliente potencial (AI) y un representante de ventas (candidato) para la empresa {company}.

La empresa {company} ofrece servicios de reclutamiento potenciados con inteligencia artificial.

Evalúa la conversación en las siguientes categorías, donde cada categoría debe recibir una puntuación entre 0 y 10:
1. Tiempo de respuesta: {average_response_time:.1f} segundos en promedio
2. Claridad y precisión en las respuestas
3. Conocimiento del producto mostrado
4. Manejo de objeciones del cliente
5. Habilidad para generar interés y cerrar ventas

Debes proporcionar:
1. Una puntuación numérica global entre 0 y 100
2. Un resumen de fortalezas (máximo 50 palabras)
3. Áreas de mejora (máximo 50 palabras)
4. Al menos 2 consejos específicos para mejorar

Formato de respuesta:
Puntuación global: [NÚMERO]

Fortalezas:
[TEXTO]

Áreas de mejora:
[TEXTO]

Consejos específicos:
- [CONSEJO 1]
- [CONSEJO 2]"""


def detect_products(messages: Iterable[TrainingMessage]) -> List[str]:
    """Product categories the candidate has mentioned, first mention first"""
    found: List[str] = []
    for message in messages:
        if message.sender_type != SENDER_CANDIDATE:
            continue
        text = message.content.lower()
        for label, keywords in PRODUCT_KEYWORDS:
            if label not in found and any(keyword in text for keyword in keywords):
                found.append(label)
    return found


def build_customer_prompt(
    representative: Optional[str],
    products: Sequence[str],
    is_first_message: bool,
) -> str:
    if products:
        product_focus = (
            f"El representante te ha mencionado: {', '.join(products)}. "
            "Centra la conversación en estos productos/servicios."
        )
    else:
        product_focus = (
            "No hay productos específicos mencionados aún. "
            "En tu primera respuesta, pregunta qué servicios o productos pueden ofrecerte."
        )

    if is_first_message:
        turn_hint = (
            "Esta es la primera interacción del representante. Responde como un cliente "
            "que ha sido contactado, preguntando qué productos o servicios pueden ofrecerte."
        )
    else:
        turn_hint = (
            "Continúa la conversación de manera natural, haciendo preguntas o "
            "planteando objeciones sobre lo que te han ofrecido."
        )

    return CUSTOMER_PROMPT.format(
        company=settings.TRAINING_COMPANY_NAME,
        representative=representative or DEFAULT_REPRESENTATIVE_NAME,
        product_focus=product_focus,
        turn_hint=turn_hint,
    )


def build_evaluation_prompt(average_response_time: float) -> str:
    return EVALUATION_PROMPT.format(
        company=settings.TRAINING_COMPANY_NAME,
        average_response_time=average_response_time,
    )


def to_chat_messages(messages: Iterable[TrainingMessage]) -> List[dict]:
    """Map transcript turns onto chat-completion roles"""
    return [
        {
            "role": "assistant" if message.sender_type == SENDER_AI else "user",
            "content": message.content,
        }
        for message in messages
    ]


def format_transcript(messages: Iterable[TrainingMessage]) -> str:
    lines = []
    for message in messages:
        role = "assistant" if message.sender_type == SENDER_AI else "user"
        timestamp = as_utc(message.sent_at).strftime("%H:%M:%S")
        lines.append(f"{role.upper()} ({timestamp}): {message.content}")
    return "Aquí está la conversación para evaluar:\n\n" + "\n\n".join(lines)


def average_response_time(messages: Sequence[TrainingMessage]) -> float:
    """
    Mean seconds the candidate took to answer, measured from the first ai turn
    between two consecutive candidate turns, or from the previous candidate
    turn when the customer did not reply in between.
    """
    candidate_turns = [m for m in messages if m.sender_type == SENDER_CANDIDATE]
    if len(candidate_turns) < 2:
        return 0.0

    total = 0.0
    for previous, current in zip(candidate_turns, candidate_turns[1:]):
        previous_at = as_utc(previous.sent_at)
        current_at = as_utc(current.sent_at)
        reference = previous_at
        for message in messages:
            if message.sender_type == SENDER_AI and previous_at < as_utc(message.sent_at) < current_at:
                reference = as_utc(message.sent_at)
                break
        total += (current_at - reference).total_seconds()

    return total / (len(candidate_turns) - 1)


def extract_score(text: str, default: float = UNPARSED_SCORE) -> float:
    """Read the 'Puntuación global: N' marker, clamped to 0-100"""
    match = SCORE_PATTERN.search(text or "")
    if not match:
        return float(default)
    return float(max(0, min(int(match.group(1)), 100)))
