"""
HuggingFaceProvider — Llama 3.2 3B Instruct via Hugging Face router (fallback).

Modello piccolo: segue peggio le istruzioni di formato, quindi in modalità JSON
si aggiunge un system message di richiamo in testa alla conversazione.
Tutte le altre differenze rispetto a Groq stanno nei parametri di sampling.

API OpenAI-compatibile (router.huggingface.co/v1).
"""
import httpx

from app.services.llm.base import EmptyCompletionError, LLMProvider

_API_URL = "https://router.huggingface.co/v1/chat/completions"
_MAX_TOKENS = 3072
_TOP_P = 0.9

_JSON_REMINDER = "Return ONLY a valid JSON object. No conversation filler."


class HuggingFaceProvider(LLMProvider):

    backend_name = "HuggingFace"

    async def _complete(self, messages: list[dict[str, str]], json_mode: bool = False) -> str:
        if json_mode:
            messages = [{"role": "system", "content": _JSON_REMINDER}, *messages]

        payload = {
            "model": self._model,
            "messages": messages,
            "max_tokens": _MAX_TOKENS,
            "temperature": self._temperature,
            "top_p": _TOP_P,
            "stream": False,
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                _API_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=payload,
            )
            resp.raise_for_status()

        choices = resp.json().get("choices") or []
        raw = choices[0].get("message", {}).get("content") if choices else None
        if not raw or not raw.strip():
            raise EmptyCompletionError("HuggingFace: risposta vuota")
        return raw
