"""
Prompt condivisi — identici per tutti i provider.

Il core tratta questi testi come opachi: li costruisce qui e li passa al
provider attivo, senza validarli. Ogni provider riceve gli stessi messaggi,
così l'output resta coerente indipendentemente dal modello usato.
"""
import json
import re
from datetime import datetime, timedelta, timezone

from app.models.schemas import Forecast, HistoryEntry, WeatherSnapshot

DEFAULT_USER_MESSAGE = "Give me travel plans"

_FOOD_RE = re.compile(r"\b(food|restaurant|dining|eat|cuisine|dish|meal|cafe|street food)\b", re.IGNORECASE)
_CLOTHING_RE = re.compile(
    r"\b(cloth|fashion|apparel|wear|boutique|textile|garment|shop|market|mall|retail)\b", re.IGNORECASE
)
_AGRICULTURE_RE = re.compile(r"\b(agri|farm|garden|crop|organic|nursery|plantation)\b", re.IGNORECASE)

_CHAT_FALLBACK = {
    "ja": "目的地を選択して、旅行プランを始めましょう。",
    "hi": "अपनी यात्रा की योजना शुरू करने के लिए कृपया एक गंतव्य चुनें।",
    "en": "Please select a destination to start planning your trip.",
}


def _language_code(language: str) -> str:
    if language.startswith("ja"):
        return "ja"
    if language.startswith("hi"):
        return "hi"
    return "en"


def visibility_level(visibility_m: float | None) -> str:
    if not visibility_m:
        return "Unknown"
    if visibility_m >= 10000:
        return "Excellent"
    if visibility_m >= 5000:
        return "Good"
    if visibility_m >= 2000:
        return "Moderate"
    return "Poor"


def format_clock(timestamp: int | None, utc_offset_s: int | None = None) -> str:
    """HH:MM nell'ora locale della città (offset UTC fornito dal meteo)."""
    if not timestamp:
        return "N/A"
    tz = timezone(timedelta(seconds=utc_offset_s or 0))
    return datetime.fromtimestamp(timestamp, tz=tz).strftime("%H:%M")


def _hour_of(item: Forecast) -> int | None:
    try:
        return int(item.time.split(" ")[1].split(":")[0])
    except (IndexError, ValueError):
        return None


def forecast_summary(weather: WeatherSnapshot, duration: int) -> str:
    """
    Riassume le previsioni in 3 punti chiave al giorno per i primi `duration` giorni.

    Restituisce stringa vuota se non ci sono previsioni.
    """
    if duration <= 0 or not weather.forecast:
        return ""

    days: dict[str, list[Forecast]] = {}
    for item in weather.forecast:
        days.setdefault(item.time.split(" ")[0], []).append(item)

    lines = []
    for day in sorted(days)[:duration]:
        items = days[day]

        def near(target: int) -> Forecast | None:
            for it in items:
                hour = _hour_of(it)
                if hour is not None and abs(hour - target) <= 1:
                    return it
            return None

        # Giorno ~12:00, sera ~18:00, notte ~21:00
        picks = {
            "Day": near(12) or items[len(items) // 2],
            "Evening": near(18),
            "Night": near(21) or items[-1],
        }

        seen: set[str] = set()
        details = []
        for label, it in picks.items():
            if it is None or it.time in seen:
                continue
            seen.add(it.time)
            temp = round(it.temp) if it.temp is not None else "N/A"
            details.append(f"{label}: {temp}°C ({it.description or 'N/A'})")

        lines.append(f"- {day}: {' | '.join(details)}")

    return f"\nFORECAST CONTEXT (3 KEY POINTS/DAY FOR {duration} DAYS):\n" + "\n".join(lines) + "\n"


def category_guidance(message: str, city: str, duration: int) -> str:
    categories = []
    if _FOOD_RE.search(message):
        categories.append("food/dining establishments")
    if _CLOTHING_RE.search(message):
        categories.append("clothing/apparel stores")
    if _AGRICULTURE_RE.search(message):
        categories.append("agricultural/nature sites")

    if categories:
        joined = " OR ".join(categories)
        return f"""
CATEGORY-SPECIFIC FOCUS DETECTED:
The user specifically mentioned: {joined}.
PRIORITY: Recommend 5-6 places in {city} that are FAMOUS for {joined} and match the user's genre preference.
FEASIBILITY & DURATION: Since the trip duration is {duration} day(s), ensure the suggestions are geographically feasible and well-paced.
- Day Trip (1 Day): Focus on iconic, high-density locations.
- Multi-Day: Suggest a balanced mix of attractions.
STRICT RULE: All suggestions MUST be relevant to the CURRENT weather and travel context.
- For Clothing: Focus on gear suitable for the current forecast (e.g., winter wear, rain gear).
- For Food: Emphasize cuisine that fits the environment (e.g., hot beverages for cold, light meals for heat).
- AUTHENTICITY: Ensure these are REAL, FAMOUS locations in {city} that define its identity."""

    return f"""
GENERAL RECOMMENDATIONS:
Provide 5-6 FAMOUS places (landmarks, monuments, natural sites, buildings) that {city} is UNIQUELY KNOWN FOR.
FEASIBILITY: Since the trip duration is {duration} day(s), suggest a feasible itinerary.
Focus on iconic heritage sites, structural marvels, and natural attractions that define this city's identity."""


def build_weather_prompt(weather: WeatherSnapshot, language: str, duration: int, message: str) -> str:
    current = weather.current

    def show(name: str) -> str:
        value = getattr(current, name, None)
        return "N/A" if value is None else str(value)

    city = getattr(current, "city", None) or "the city"
    visibility_m = getattr(current, "visibility", None)
    visibility_km = f"{visibility_m / 1000:.1f}" if visibility_m else "N/A"
    offset = getattr(current, "timezone", None)
    sunrise = format_clock(getattr(current, "sunrise", None), offset)
    sunset = format_clock(getattr(current, "sunset", None), offset)

    return f"""
You are an expert AI Travel Planner specialized in Weather-Aware Itineraries, Outings, Dining, and Clothing advice.

CORE EXPERTISE:
1. WEATHER-CENTRIC TRAVEL: Suggesting detailed, weather-appropriate trip plans, sightseeing, historical monuments, and architectural marvels.
2. OUTINGS & LANDMARKS: Recommending outings to natural places, buildings, and famous sites that best fit the forecast.
3. HOLISTIC WEATHER-AWARENESS: Every suggestion (including Food, Clothing, or Visiting Places) MUST be justified by the current weather conditions.

CURRENT TRIP DURATION: {duration} Day(s)
CURRENT CITY: {city}

DETAILED WEATHER CONTEXT:
- Temperature: {show('temp')}°C (Feels like: {show('feels_like')}°C)
- Conditions: {show('description')}
- Visibility: {visibility_km}km ({visibility_level(visibility_m)})
- Humidity: {show('humidity')}%
- Wind Speed: {show('wind_speed')} m/s
- Cloud Cover: {show('clouds')}%
- Sunrise: {sunrise} | Sunset: {sunset}
- Pressure: {show('pressure')} hPa
{forecast_summary(weather, duration)}
GOAL: Provide EXACTLY 5-6 recommendations for {city} strictly based on the current weather conditions, considering a {duration}-day trip.
FEASIBILITY:
- If duration is 1 day, provide a "Perfect Day Trip" plan where locations are reasonably close or logically connected.
- If duration is > 1 day, distribute suggestions as a multi-day itinerary and set "day" and "timeOfDay" on every place.
MANDATORY: You MUST provide AT LEAST 4 places and NO MORE THAN 6 places in your response.
{category_guidance(message, city, duration)}

DO NOT suggest generic places. Recommend REAL, FAMOUS attractions, buildings, monuments, and natural sites that tourists and locals actually visit in {city}.

WEATHER-AWARE GUIDELINES:
- Low visibility (< 2km) or Fog → Suggest indoor activities, museums, monuments with interior access.
- Sunrise/Sunset times → Recommend timing for outdoor activities (e.g., morning walks before {sunset}).
- High humidity (> 70%) + High temp → Suggest water activities, air-conditioned venues, light clothing.
- Low temperature (< 10°C) → Recommend warm indoor spots, heated museums, winter wear.
- Clear skies + Good visibility → Emphasize outdoor sightseeing, parks, viewpoints, natural landmarks.
- Rainy conditions → Indoor attractions, covered markets, waterproof gear.

RULES:
1. FOCUS ONLY ON THE ALLOWED TOPICS. If the user asks something else, politely redirect them.
2. Your advice MUST always be for the CURRENT CITY ({city}). If the user explicitly asks for another city's weather or trip plan, respond (in {language}) with EXACTLY: "Please change the city from bottom menu to fetch weather details" and NOTHING ELSE.
3. RETURN ONLY A RAW JSON OBJECT. No markdown, no backticks, no preamble.
4. JSON STRUCTURE:
{{
  "explanation": "A detailed (4-5 sentence) weather-based introduction for {city} in {language}.",
  "places": [
    {{
      "day": 1,
      "timeOfDay": "Morning | Afternoon | Evening | Night",
      "name": "REAL NAME of a FAMOUS place in {city} in {language}",
      "description": "What this place is famous for in {language}.",
      "suitability": "Why this is a 'Best Fit' for the current weather in {language}.",
      "weatherMatch": "A short dynamic tag (2-3 words) like 'Rainy Day Pick' in {language}.",
      "visitDuration": "Estimated time to spend there",
      "travelTip": "One practical tip in {language}",
      "details": "Historical significance, what to see, best time to visit in {language}.",
      "imageSearchQuery": "3-4 keywords in English for image search.",
      "website": "Direct official website URL",
      "mapsUrl": "Google Maps URL"
    }}
  ],
  "closing": "A polite, weather-aware closing sentence in {language}."
}}

USER MESSAGE: "{message}"
Response:"""


def build_intent_prompt(message: str, language: str) -> str:
    return f"""Analyze user message for weather-related intents.
Possible intents in JSON array:
- {{"type": "location_change", "location": "City Name"}} (ONLY if the user explicitly wants to switch to or see information FOR this city, NOT if mentioned as personal context like "I am from India")
- {{"type": "outing"}} (planning/itinerary)
- {{"type": "food"}} (restaurants/dining)
- {{"type": "forecast"}} (hourly/daily)
- {{"type": "general"}} (advice like umbrella/clothing)

Message: "{message}"
Language: {language}
Return ONLY JSON array of intents, e.g.,
[{{"type":"location_change", "location": "Tokyo"}}, {{"type":"forecast"}}]"""


def build_messages(
    system_prompt: str,
    history: list[HistoryEntry] | None,
    message: str,
) -> list[dict[str, str]]:
    """Messaggi in formato chat: system, storico conversazione, messaggio utente."""
    messages = [{"role": "system", "content": system_prompt}]
    for entry in history or []:
        messages.append({"role": entry.role, "content": entry.content})
    messages.append({"role": "user", "content": message or DEFAULT_USER_MESSAGE})
    return messages


def chat_fallback_reply(language: str) -> str:
    """Invito localizzato a scegliere una destinazione (nessun meteo disponibile)."""
    return json.dumps(
        {"explanation": _CHAT_FALLBACK[_language_code(language)], "places": []},
        ensure_ascii=False,
    )
