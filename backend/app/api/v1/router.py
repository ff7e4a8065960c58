#To aggregate all routes for API1


from fastapi import APIRouter

from app.api.v1.routes.chat import router as chat_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(chat_router, prefix="/chat", tags=["chat"])
