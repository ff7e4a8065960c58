"""
GroqProvider — Llama 3.3 70B via Groq (provider primario).

Free tier permanente, >300 token/sec.
Nessuna carta di credito. Registrazione su console.groq.com.

API OpenAI-compatibile: usa response_format json_object per output strutturato.
"""
import httpx

from app.services.llm.base import EmptyCompletionError, LLMProvider

_API_URL = "https://api.groq.com/openai/v1/chat/completions"


class GroqProvider(LLMProvider):

    backend_name = "Groq"

    async def _complete(self, messages: list[dict[str, str]], json_mode: bool = False) -> str:
        payload = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                _API_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=payload,
            )
            resp.raise_for_status()

        raw = resp.json()["choices"][0]["message"]["content"]
        if not raw or not raw.strip():
            raise EmptyCompletionError("Groq: risposta vuota")
        return raw
