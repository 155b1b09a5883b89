from datetime import datetime, timedelta, timezone

from convertia.core.config import settings
from convertia.models.training import TrainingMessage
from convertia.training import prompts

T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


def turn(sender, content, seconds):
    return TrainingMessage(sender_type=sender, content=content, sent_at=T0 + timedelta(seconds=seconds))


def test_detect_products_first_mention_order_candidate_only():
    messages = [
        turn("ai", "¿Tienen combos con TV?", 0),
        turn("candidate", "Tenemos fibra óptica y wifi", 5),
        turn("candidate", "También un plan móvil e internet", 10),
        turn("candidate", "Y seguridad para el hogar", 15),
    ]

    assert prompts.detect_products(messages) == ["internet", "plan móvil", "servicios para el hogar"]


def test_customer_prompt_defaults_representative():
    prompt = prompts.build_customer_prompt(None, [], is_first_message=True)

    assert "representante" in prompt
    assert "No hay productos específicos" in prompt


def test_average_response_time_measures_from_ai_turn():
    messages = [
        turn("candidate", "Hola", 0),
        turn("ai", "¿Qué ofrece?", 2),
        turn("candidate", "Internet", 12),
        turn("ai", "¿Precio?", 14),
        turn("candidate", "20 euros", 20),
    ]

    assert prompts.average_response_time(messages) == 8.0


def test_average_response_time_without_reply_uses_previous_candidate_turn():
    messages = [
        turn("candidate", "Hola", 0),
        turn("candidate", "¿Sigue ahí?", 30),
    ]

    assert prompts.average_response_time(messages) == 30.0


def test_average_response_time_needs_two_candidate_turns():
    assert prompts.average_response_time([turn("candidate", "Hola", 0), turn("ai", "Hola", 1)]) == 0.0


def test_extract_score_variants():
    assert prompts.extract_score("Puntuacion global: 77") == 77
    assert prompts.extract_score("puntuación global: ** 120") == 100
    assert prompts.extract_score("sin marcador") == prompts.UNPARSED_SCORE


def test_transcript_format_and_roles():
    messages = [turn("candidate", "Hola", 0), turn("ai", "Buenas", 65)]

    assert prompts.to_chat_messages(messages) == [
        {"role": "user", "content": "Hola"},
        {"role": "assistant", "content": "Buenas"},
    ]
    text = prompts.format_transcript(messages)
    assert text.startswith("Aquí está la conversación para evaluar:")
    assert "USER (10:00:00): Hola" in text
    assert "ASSISTANT (10:01:05): Buenas" in text


def test_evaluation_prompt_describes_company_and_latency():
    prompt = prompts.build_evaluation_prompt(4.5)

    assert f"La empresa {settings.TRAINING_COMPANY_NAME} ofrece servicios de reclutamiento" in prompt
    assert "4.5 segundos en promedio" in prompt
    assert "Puntuación global: [NÚMERO]" in prompt
