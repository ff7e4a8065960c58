import logging

from fastapi import APIRouter, HTTPException

from app.api.deps import OrchestratorDep
from app.models.schemas import ChatIn, IntentIn, IntentOut, RecommendationOut
from app.services.recommendation import generate_recommendation, identify_intents

logger = logging.getLogger(__name__)

router = APIRouter()


"""
Endpoint Chat.-----------------------------------------------------------------------------------

POST /api/v1/chat
  {
    "message": "cosa posso visitare oggi?",
    "weatherData": {"current": {...}, "forecast": [...]},
    "language": "en-US",
    "history": [{"role": "user", "content": "..."}],
    "duration": 2
  }

Risponde sempre 200: anche se tutti i provider falliscono il client riceve
un piano valido (FALLBACK_PLAN) con provider "None (all failed)".
"""
@router.post("", response_model=RecommendationOut)
async def chat(
    orchestrator: OrchestratorDep,
    body: ChatIn,
) -> RecommendationOut:

    #Validation area -------------------------------------------
    if not body.message.strip() and body.weather_data is None:
        raise HTTPException(status_code=400, detail="Message or Weather Data is required")
    #Validation area -------------------------------------------

    result = await generate_recommendation(
        orchestrator,
        message=body.message,
        weather=body.weather_data,
        language=body.language,
        history=body.history,
        duration=body.duration,
    )

    logger.info("AI Response from: %s", result.provider)
    return result


@router.post("/intent", response_model=IntentOut)
async def chat_intent(
    orchestrator: OrchestratorDep,
    body: IntentIn,
) -> IntentOut:
    """Classifica il messaggio (cambio città, uscita, cibo, previsioni...). Mai bloccante."""
    intents = await identify_intents(orchestrator, body.message, body.language)
    return IntentOut(intents=intents)
