"""
Dependency FastAPI condivise.

L'orchestrator è costruito una volta nel lifespan (app.main) e salvato in
app.state: le route lo ricevono da qui, i test lo sostituiscono con
app.dependency_overrides[get_orchestrator].
"""
from typing import Annotated

from fastapi import Depends, Request

from app.services.llm.orchestrator import FallbackOrchestrator


def get_orchestrator(request: Request) -> FallbackOrchestrator:
    return request.app.state.orchestrator


OrchestratorDep = Annotated[FallbackOrchestrator, Depends(get_orchestrator)]
