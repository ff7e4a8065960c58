"""
Fixture condivise per la test suite Tenki-Talk.

Tutte le dipendenze esterne (backend LLM via HTTP) vengono simulate:
provider scriptati in memoria per orchestrator/servizi, httpx.MockTransport
per i test del trasporto dei singoli provider. Nessuna API key reale serve.
"""
import httpx
import pytest

from app.models.schemas import CurrentWeather, Forecast, WeatherSnapshot
from app.services.llm.base import LLMProvider


# ---------------------------------------------------------------------------
# Provider scriptato
# ---------------------------------------------------------------------------

class ScriptedProvider(LLMProvider):
    """
    Provider finto: ogni chiamata a _complete consuma la prossima risposta.

    Una risposta che è un'eccezione viene sollevata (errore di trasporto).
    L'ultima risposta viene ripetuta per le chiamate successive.
    """

    backend_name = "Fake"

    def __init__(self, model: str, replies: list) -> None:
        super().__init__(api_key="test-key", model=model)
        self._replies = list(replies)
        self.calls: list[tuple[list[dict[str, str]], bool]] = []

    async def _complete(self, messages, json_mode=False):
        self.calls.append((messages, json_mode))
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def make_provider():
    """Factory: make_provider("primary", ["risposta"]) → ScriptedProvider."""
    def _make(model: str, *replies) -> ScriptedProvider:
        return ScriptedProvider(model, list(replies))
    return _make


def transport_error(status: int = 500) -> httpx.HTTPStatusError:
    """Errore HTTP come lo solleverebbe resp.raise_for_status()."""
    request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"Server error '{status}'", request=request, response=response)


@pytest.fixture
def http_error():
    return transport_error


# ---------------------------------------------------------------------------
# Trasporto HTTP simulato
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http(monkeypatch):
    """
    Sostituisce httpx.AsyncClient con un client su MockTransport.

    Uso: requests = mock_http(handler) — handler(request) → httpx.Response.
    La lista restituita raccoglie le richieste inviate.
    """
    real_client = httpx.AsyncClient

    def _install(handler):
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        def factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(recording)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        return seen

    return _install


def chat_completion(content: str) -> dict:
    """Payload di risposta in formato OpenAI (Groq, Hugging Face router)."""
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def openai_payload():
    return chat_completion


# ---------------------------------------------------------------------------
# Meteo fittizio
# ---------------------------------------------------------------------------

@pytest.fixture
def weather_kyoto():
    """Kyoto, pioggia leggera, previsioni su due giorni."""
    return WeatherSnapshot(
        current=CurrentWeather(
            city="Kyoto",
            country="JP",
            temp=14.2,
            feels_like=13.1,
            humidity=82,
            pressure=1009,
            description="light rain",
            wind_speed=3.4,
            clouds=90,
            visibility=4000,
            sunrise=1_760_649_600,   # 2025-10-16 21:20 UTC → 06:20 JST
            sunset=1_760_690_400,
            timezone=9 * 3600,
        ),
        forecast=[
            Forecast(time="2025-10-17 09:00:00", temp=13.0, description="light rain"),
            Forecast(time="2025-10-17 12:00:00", temp=15.4, description="light rain"),
            Forecast(time="2025-10-17 18:00:00", temp=13.8, description="overcast clouds"),
            Forecast(time="2025-10-17 21:00:00", temp=12.1, description="clear sky"),
            Forecast(time="2025-10-18 12:00:00", temp=18.6, description="clear sky"),
        ],
    )
