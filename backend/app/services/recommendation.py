"""
Recommendation service — collega orchestrator, provider e parser.

Flusso di generate_recommendation():
  Step 1: orchestrator.run()  → testo grezzo del primo provider che risponde
  Step 2: extract_json()      → dict/list oppure None
  Step 3: coerce_recommendation() → TravelRecommendation

Garanzia verso il layer HTTP: non solleva MAI eccezioni.
  - tutti i provider falliti      → FALLBACK_PLAN, provider "None (all failed)"
  - testo ricevuto ma non JSON     → testo grezzo come explanation, nessuna tappa
  - qualunque errore inatteso      → FALLBACK_PLAN (il dettaglio resta nei log)

Un parse fallito NON fa passare al provider successivo: il provider ha
risposto, e una seconda chiamata a pagamento non è giustificata.
"""
import logging
from typing import Any

from pydantic import ValidationError

from app.models.schemas import (
    ALL_FAILED_PROVIDER,
    FALLBACK_PLAN,
    HistoryEntry,
    Intent,
    Place,
    RecommendationOut,
    TravelRecommendation,
    WeatherSnapshot,
)
from app.services.llm.base import LLMProvider, SessionContext
from app.services.llm.orchestrator import AllProvidersFailedError, FallbackOrchestrator
from app.services.llm.parser import extract_json

logger = logging.getLogger(__name__)

# Usata quando il modello restituisce tappe ma nessuna introduzione
_MISSING_EXPLANATION = "Here are some places worth visiting with the current weather."


# ---------------------------------------------------------------------------
# Utility interne
# ---------------------------------------------------------------------------

def _text_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def coerce_recommendation(data: Any) -> TravelRecommendation | None:
    """
    Adatta un valore JSON estratto alla forma TravelRecommendation.

    Tollerante: campi opzionali mancanti restano assenti, elementi di `places`
    che non sono oggetti vengono scartati. Restituisce None solo se `data`
    non è un oggetto JSON.
    """
    if not isinstance(data, dict):
        return None

    places: list[Place] = []
    raw_places = data.get("places")
    if isinstance(raw_places, list):
        for item in raw_places:
            if not isinstance(item, dict):
                continue
            try:
                places.append(Place.model_validate(item))
            except ValidationError as exc:
                logger.debug("Tappa scartata: %s", exc)

    return TravelRecommendation(
        explanation=_text_or_none(data.get("explanation")) or _MISSING_EXPLANATION,
        places=tuple(places),
        closing=_text_or_none(data.get("closing")),
    )


def _degrade_to_text(raw: str) -> TravelRecommendation:
    """Il modello ha risposto ma non in JSON: si mostra il testo così com'è."""
    text = raw.strip()
    if not text:
        return FALLBACK_PLAN
    return TravelRecommendation(explanation=text, places=())


# ---------------------------------------------------------------------------
# Entry point pubblici
# ---------------------------------------------------------------------------

async def generate_recommendation(
    orchestrator: FallbackOrchestrator,
    message: str,
    weather: WeatherSnapshot | None,
    language: str = "en-US",
    history: list[HistoryEntry] | None = None,
    duration: int = 1,
) -> RecommendationOut:
    """
    Piano di viaggio basato sul meteo, con fallback automatico tra provider.

    Senza snapshot meteo si usa il flusso di chat semplice.

    Returns:
        RecommendationOut sempre valido; nel caso peggiore FALLBACK_PLAN con
        provider "None (all failed)".
    """
    try:
        context = SessionContext(
            city=weather.current.city if weather and weather.current else None,
            history=list(history or []),
        )

        if weather is not None:
            async def operation(provider: LLMProvider) -> str:
                return await provider.generate_weather_recommendation(
                    message, weather, language, context, duration
                )
        else:
            async def operation(provider: LLMProvider) -> str:
                return await provider.generate_chat_reply(message, language, context)

        # ── Step 1: primo provider che risponde
        try:
            outcome = await orchestrator.run(operation)
        except AllProvidersFailedError:
            return RecommendationOut(
                suggestions=FALLBACK_PLAN,
                provider=ALL_FAILED_PROVIDER,
                language=language,
                weather_data=weather,
            )

        # ── Step 2-3: parsing tollerante + adattamento allo schema
        data = extract_json(outcome.result)
        suggestions = coerce_recommendation(data)
        if suggestions is None:
            logger.warning(
                "Risposta di '%s' non strutturabile, mostrata come testo", outcome.provider_name
            )
            suggestions = _degrade_to_text(outcome.result)

        return RecommendationOut(
            suggestions=suggestions,
            provider=outcome.provider_name,
            language=language,
            weather_data=weather,
        )

    except Exception:
        logger.exception("Errore inatteso nella generazione del piano, uso il piano di fallback")
        return RecommendationOut(
            suggestions=FALLBACK_PLAN,
            provider=ALL_FAILED_PROVIDER,
            language=language,
            weather_data=weather,
        )


async def identify_intents(
    orchestrator: FallbackOrchestrator,
    message: str,
    language: str = "en-US",
) -> list[Intent]:
    """Intent del messaggio utente. Consultivo: non blocca mai, default [general]."""
    try:
        outcome = await orchestrator.run(
            lambda provider: provider.classify_intent(message, language)
        )
        return outcome.result or [Intent(type="general")]
    except Exception as exc:
        logger.warning("Classificazione intent non disponibile: %s", exc)
        return [Intent(type="general")]
