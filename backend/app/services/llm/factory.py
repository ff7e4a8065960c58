"""
LLM Provider Factory — costruisce la lista dei provider attivi.

Ordine di default: Groq (primario) → Hugging Face (fallback) → Gemini.
L'ordine è letto da LLM_PROVIDER_ORDER nel .env ed è statico: nessun
riordino dinamico, nessuna scelta per richiesta.

Un provider senza API key non è un errore: il suo builder restituisce None
e il provider semplicemente non entra nella lista. Se la lista resta vuota
ogni richiesta degrada direttamente al FALLBACK_PLAN.

La lista viene costruita una sola volta, nel lifespan dell'app.
"""
import logging
from collections.abc import Callable

from app.config import Settings
from app.services.llm.base import LLMProvider
from app.services.llm.gemini import GeminiProvider
from app.services.llm.groq import GroqProvider
from app.services.llm.huggingface import HuggingFaceProvider
from app.services.llm.orchestrator import FallbackOrchestrator

logger = logging.getLogger(__name__)


def build_groq(settings: Settings) -> LLMProvider | None:
    if not settings.groq_api_key:
        return None
    return GroqProvider(
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        timeout=settings.llm_timeout_seconds,
        temperature=settings.llm_temperature,
    )


def build_huggingface(settings: Settings) -> LLMProvider | None:
    if not settings.huggingface_api_key:
        return None
    return HuggingFaceProvider(
        api_key=settings.huggingface_api_key,
        model=settings.huggingface_model,
        timeout=settings.llm_timeout_seconds,
        temperature=settings.llm_temperature,
    )


def build_gemini(settings: Settings) -> LLMProvider | None:
    if not settings.gemini_api_key:
        return None
    return GeminiProvider(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.llm_timeout_seconds,
        temperature=settings.llm_temperature,
    )


_BUILDERS: dict[str, Callable[[Settings], LLMProvider | None]] = {
    "groq": build_groq,
    "huggingface": build_huggingface,
    "gemini": build_gemini,
}


def build_providers(settings: Settings) -> list[LLMProvider]:
    """Provider configurati, nell'ordine di LLM_PROVIDER_ORDER (duplicati ignorati)."""
    providers: list[LLMProvider] = []
    seen: set[str] = set()

    for name in settings.llm_provider_order:
        key = name.strip().lower()
        if key in seen:
            continue
        seen.add(key)

        builder = _BUILDERS.get(key)
        if builder is None:
            logger.warning("LLM provider sconosciuto in LLM_PROVIDER_ORDER: '%s'", name)
            continue

        provider = builder(settings)
        if provider is None:
            logger.info("LLM provider '%s' non configurato (API key assente), escluso", key)
            continue
        providers.append(provider)

    if not providers:
        logger.warning("Nessun LLM provider attivo: tutte le risposte useranno il piano di fallback")
    return providers


def build_orchestrator(settings: Settings) -> FallbackOrchestrator:
    return FallbackOrchestrator(build_providers(settings), timeout=settings.llm_timeout_seconds)
