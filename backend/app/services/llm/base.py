"""
LLM Provider Layer — classe astratta e logica condivisa.

I provider differiscono solo per il trasporto (_complete): prompt, parsing
degli intent e risposta di chat sono identici per tutti, così l'output resta
coerente indipendentemente dal modello usato.

Contratto per la generazione meteo: gli errori di trasporto/auth/quota NON
vengono mai convertiti in stringa vuota, ma propagati, così l'orchestrator
può passare al provider successivo.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.models.schemas import HistoryEntry, Intent, WeatherSnapshot
from app.services.llm.parser import extract_json_array
from app.services.llm.prompts import (
    build_intent_prompt,
    build_messages,
    build_weather_prompt,
    chat_fallback_reply,
)

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Contesto della conversazione, fornito dal chiamante a ogni richiesta."""
    city: str | None = None
    last_intent: str | None = None
    history: list[HistoryEntry] = field(default_factory=list)


class EmptyCompletionError(ValueError):
    """Il provider ha risposto 2xx ma senza testo."""


class LLMProvider(ABC):

    # Nome leggibile del backend, es. "Groq"
    backend_name: str = ""

    def __init__(self, api_key: str, model: str, timeout: float = 30.0, temperature: float = 0.7) -> None:
        if not api_key:
            raise ValueError(f"{type(self).__name__}: API key mancante")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._temperature = temperature

    def identity(self) -> str:
        """Nome stabile per log e per il campo `provider` restituito al client."""
        return f"{self.backend_name} ({self._model})"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.identity()}>"

    @abstractmethod
    async def _complete(self, messages: list[dict[str, str]], json_mode: bool = False) -> str:
        """
        Chiamata HTTP al backend.

        Args:
            messages:  lista {"role", "content"} in formato chat (system/user/assistant)
            json_mode: chiede al backend output JSON, dove supportato

        Raises:
            httpx.HTTPError:       errori di rete, timeout, status 4xx/5xx
            EmptyCompletionError:  risposta senza testo
            KeyError/ValueError:   payload di risposta malformato
        """
        ...

    async def classify_intent(self, message: str, language: str) -> list[Intent]:
        """Best-effort: in caso di qualunque errore restituisce [general]."""
        prompt = build_intent_prompt(message, language)
        try:
            text = await self._complete([
                {"role": "system", "content": prompt},
                {"role": "user", "content": message},
            ])
            items = extract_json_array(text)
            if not items:
                raise ValueError("nessun array di intent nella risposta")
            return [Intent.model_validate(item) for item in items]
        except Exception as exc:
            logger.warning("%s: classificazione intent fallita, uso general: %s: %s", self.identity(), type(exc).__name__, exc)
        return [Intent(type="general")]

    async def generate_weather_recommendation(
        self,
        message: str,
        weather: WeatherSnapshot,
        language: str,
        context: SessionContext,
        duration: int = 1,
    ) -> str:
        """
        Chiede al modello un piano di viaggio basato sul meteo.

        Returns:
            Il testo grezzo del modello (JSON atteso, non garantito).
        """
        system_prompt = build_weather_prompt(weather, language, duration, message)
        messages = build_messages(system_prompt, context.history, message)
        text = await self._complete(messages, json_mode=True)
        return text.strip()

    async def generate_chat_reply(self, message: str, language: str, context: SessionContext) -> str:
        # Senza meteo non c'è nulla da ragionare: si invita a scegliere una città
        return chat_fallback_reply(language)
