"""
Fallback Orchestrator — primo provider che risponde vince.

Dato un ordine statico di provider (primario per primo), esegue l'operazione
richiesta su ciascuno, in sequenza, finché uno non completa senza eccezioni.
Ogni provider ha esattamente un tentativo per richiesta: nessun retry sullo
stesso provider, nessuna chiamata in parallelo (i backend sono a quota).

L'orchestrator non interpreta il testo restituito: il parsing avviene un
livello sopra, in app.services.recommendation.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from app.services.llm.base import LLMProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ProviderFailure:
    provider_name: str
    reason: str


@dataclass(frozen=True)
class FallbackResult(Generic[T]):
    result: T
    provider_name: str


class AllProvidersFailedError(RuntimeError):
    """Tutti i provider attivi hanno fallito (o la lista è vuota)."""

    def __init__(self, failures: Sequence[ProviderFailure]) -> None:
        self.failures = list(failures)
        if self.failures:
            detail = "; ".join(f"{f.provider_name}: {f.reason}" for f in self.failures)
        else:
            detail = "nessun provider configurato"
        super().__init__(f"Tutti i provider LLM hanno fallito. Errori: {detail}")


class FallbackOrchestrator:

    def __init__(self, providers: Sequence[LLMProvider], timeout: float | None = None) -> None:
        """
        Args:
            providers: provider attivi nell'ordine di preferenza; la lista è
                       letta soltanto, quindi condivisibile tra richieste.
            timeout:   limite in secondi per ogni tentativo. None = nessun limite
                       oltre a quello del client HTTP del provider.
        """
        self._providers = tuple(providers)
        self._timeout = timeout

    @property
    def providers(self) -> tuple[LLMProvider, ...]:
        return self._providers

    @property
    def provider_names(self) -> list[str]:
        return [p.identity() for p in self._providers]

    async def run(self, operation: Callable[[LLMProvider], Awaitable[T]]) -> FallbackResult[T]:
        """
        Esegue `operation` sui provider in ordine fino al primo successo.

        Raises:
            AllProvidersFailedError: se tutti falliscono; contiene un
                ProviderFailure per ogni tentativo.
        """
        failures: list[ProviderFailure] = []

        for provider in self._providers:
            name = provider.identity()
            try:
                if self._timeout is None:
                    result = await operation(provider)
                else:
                    result = await asyncio.wait_for(operation(provider), timeout=self._timeout)
            except Exception as exc:
                if isinstance(exc, asyncio.TimeoutError):
                    reason = f"timeout dopo {self._timeout}s"
                else:
                    reason = f"{type(exc).__name__}: {exc}"
                logger.warning("LLM provider '%s' fallito: %s", name, reason)
                failures.append(ProviderFailure(provider_name=name, reason=reason))
                continue

            if failures:
                logger.info("LLM provider '%s' ha risposto dopo %d fallback", name, len(failures))
            else:
                logger.info("LLM provider '%s' ha risposto", name)
            return FallbackResult(result=result, provider_name=name)

        error = AllProvidersFailedError(failures)
        logger.error(str(error))
        raise error
