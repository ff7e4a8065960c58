import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1.router import api_router
from app.services.llm.factory import build_orchestrator

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup — provider costruiti una sola volta, condivisi in sola lettura
    app.state.orchestrator = build_orchestrator(settings)

    yield


app = FastAPI(
    title="Tenki-Talk API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(api_router)


@app.get("/api/v1/health")
async def health(request: Request):
    orchestrator = getattr(request.app.state, "orchestrator", None)
    providers = orchestrator.provider_names if orchestrator else []
    return {"status": "ok", "env": settings.app_env, "providers": providers}
