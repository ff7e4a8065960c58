from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# Il frontend e i modelli parlano camelCase (weatherMatch, timeOfDay, ...):
# i campi Python restano snake_case, gli alias coprono il JSON.
_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Meteo — snapshot passato dal client, già normalizzato dal weather wrapper
# ---------------------------------------------------------------------------

class CurrentWeather(BaseModel):
    city: str | None = None
    country: str | None = None
    temp: float | None = None
    feels_like: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    description: str | None = None
    details: str | None = None
    wind_speed: float | None = None
    wind_deg: float | None = None
    clouds: float | None = None
    visibility: float | None = None   # metri
    uvi: float | None = None
    sunrise: int | None = None        # Unix timestamp
    sunset: int | None = None         # Unix timestamp
    sea_level: float | None = None    # hPa
    grnd_level: float | None = None   # hPa
    dt: int | None = None
    timezone: int | None = None       # offset UTC in secondi (OpenWeather)


class Forecast(BaseModel):
    time: str                         # "YYYY-MM-DD HH:MM:SS"
    temp: float | None = None
    description: str | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    rain: float | None = None


class WeatherSnapshot(BaseModel):
    current: CurrentWeather | None = None
    forecast: list[Forecast] = []


# ---------------------------------------------------------------------------
# Conversazione e intent
# ---------------------------------------------------------------------------

class HistoryEntry(BaseModel):
    role: Literal["user", "assistant"]
    content: str


IntentType = Literal[
    "location_change",
    "weather_query",
    "general_query",
    "outing",
    "food",
    "forecast",
    "general",
]


class Intent(BaseModel):
    type: IntentType
    location: str | None = None


# ---------------------------------------------------------------------------
# Contratto di output strutturato
# ---------------------------------------------------------------------------

TimeOfDay = Literal["Morning", "Afternoon", "Evening", "Night"]

_TIMES_OF_DAY = ("Morning", "Afternoon", "Evening", "Night")
_REQUIRED_TEXT = ("name", "description", "suitability", "details")
_OPTIONAL_TEXT = (
    "weather_match",
    "visit_duration",
    "travel_tip",
    "image_search_query",
    "website",
    "maps_url",
)


def _as_text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _as_day(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and value >= 1:
        return value
    return None


def _as_time_of_day(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    for candidate in _TIMES_OF_DAY:
        if value.strip().lower() == candidate.lower():
            return candidate
    return None


class Place(BaseModel):
    """
    Una tappa consigliata.

    La validazione è volutamente permissiva: i modelli omettono campi o
    restituiscono tipi sbagliati, e un campo mancante non deve mai scartare
    l'intera tappa. I valori opzionali non interpretabili diventano None.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str = ""
    description: str = ""
    suitability: str = ""
    details: str = ""
    weather_match: str | None = None
    day: int | None = Field(default=None, ge=1)
    time_of_day: TimeOfDay | None = None
    visit_duration: str | None = None
    travel_tip: str | None = None
    image_search_query: str | None = None
    website: str | None = None
    maps_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_loose_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        def pick(name: str) -> Any:
            alias = to_camel(name)
            return data[alias] if alias in data else data.get(name)

        cleaned: dict[str, Any] = {}
        for name in _REQUIRED_TEXT:
            cleaned[name] = _as_text(pick(name)) or ""
        for name in _OPTIONAL_TEXT:
            cleaned[name] = _as_text(pick(name))

        # Alcuni prompt chiedono "matchLabel" invece di "weatherMatch"
        if cleaned["weather_match"] is None:
            cleaned["weather_match"] = _as_text(data.get("matchLabel"))

        cleaned["day"] = _as_day(pick("day"))
        cleaned["time_of_day"] = _as_time_of_day(pick("time_of_day"))
        return cleaned


class TravelRecommendation(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    explanation: str
    places: tuple[Place, ...] = ()
    closing: str | None = None


# Risposta di emergenza quando nessun provider risponde. Creata una volta,
# condivisa da tutte le richieste: il modello è frozen e places è una tupla.
FALLBACK_PLAN = TravelRecommendation(
    explanation=(
        "I encountered a technical issue while generating your plan. "
        "Please try again with a different city or query."
    ),
    places=(),
    closing="Safe travels!",
)

ALL_FAILED_PROVIDER = "None (all failed)"


# ---------------------------------------------------------------------------
# Request / response del layer HTTP
# ---------------------------------------------------------------------------

class ChatIn(BaseModel):
    model_config = _CAMEL

    message: str = ""
    weather_data: WeatherSnapshot | None = None
    language: str = "en-US"
    history: list[HistoryEntry] = []
    duration: int = Field(default=1, ge=1, le=14)


class RecommendationOut(BaseModel):
    model_config = _CAMEL

    suggestions: TravelRecommendation
    provider: str
    language: str = "en-US"
    weather_data: WeatherSnapshot | None = None


class IntentIn(BaseModel):
    message: str
    language: str = "en-US"


class IntentOut(BaseModel):
    intents: list[Intent]
