"""
GeminiProvider — Google Gemini 2.5 Flash (fallback finale).

Free tier: 10 req/min, 250 req/giorno, 250K token/min.
Nessuna carta di credito. API key su aistudio.google.com.

L'API non è OpenAI-compatibile: i messaggi system finiscono in
systemInstruction e il ruolo "assistant" diventa "model".
Usa responseMimeType: "application/json" per forzare output JSON strutturato.
"""
import httpx

from app.services.llm.base import EmptyCompletionError, LLMProvider

_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


def _to_gemini(messages: list[dict[str, str]]) -> dict:
    system_parts = []
    contents = []
    for m in messages:
        if m["role"] == "system":
            system_parts.append({"text": m["content"]})
            continue
        role = "model" if m["role"] == "assistant" else "user"
        contents.append({"role": role, "parts": [{"text": m["content"]}]})

    payload: dict = {"contents": contents}
    if system_parts:
        payload["systemInstruction"] = {"parts": system_parts}
    return payload


class GeminiProvider(LLMProvider):

    backend_name = "Gemini"

    async def _complete(self, messages: list[dict[str, str]], json_mode: bool = False) -> str:
        payload = _to_gemini(messages)
        payload["generationConfig"] = {"temperature": self._temperature}
        if json_mode:
            payload["generationConfig"]["responseMimeType"] = "application/json"

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                _API_URL.format(model=self._model),
                params={"key": self._api_key},
                json=payload,
            )
            resp.raise_for_status()

        parts = resp.json()["candidates"][0]["content"]["parts"]
        raw = "".join(p.get("text", "") for p in parts)
        if not raw or not raw.strip():
            raise EmptyCompletionError("Gemini: risposta vuota")
        return raw
