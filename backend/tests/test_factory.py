"""
Test per la factory dei provider (llm/factory.py).

Le Settings vengono costruite esplicitamente: nessuna lettura di chiavi reali.
"""
from app.config import Settings
from app.services.llm.factory import (
    build_gemini,
    build_groq,
    build_huggingface,
    build_orchestrator,
    build_providers,
)
from app.services.llm.gemini import GeminiProvider
from app.services.llm.groq import GroqProvider
from app.services.llm.huggingface import HuggingFaceProvider


def _settings(**overrides) -> Settings:
    values = dict(groq_api_key="", huggingface_api_key="", gemini_api_key="")
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestBuilders:

    def test_missing_key_returns_none(self):
        s = _settings()
        assert build_groq(s) is None
        assert build_huggingface(s) is None
        assert build_gemini(s) is None

    def test_configured_key_builds_provider(self):
        s = _settings(groq_api_key="g", huggingface_api_key="h", gemini_api_key="m", gemini_model="gemini-x")
        assert isinstance(build_groq(s), GroqProvider)
        assert isinstance(build_huggingface(s), HuggingFaceProvider)
        assert build_gemini(s).identity() == "Gemini (gemini-x)"


class TestBuildProviders:

    def test_default_order(self):
        s = _settings(groq_api_key="g", huggingface_api_key="h", gemini_api_key="m")
        providers = build_providers(s)
        assert [type(p) for p in providers] == [GroqProvider, HuggingFaceProvider, GeminiProvider]

    def test_unconfigured_providers_are_omitted(self):
        providers = build_providers(_settings(huggingface_api_key="h"))
        assert [type(p) for p in providers] == [HuggingFaceProvider]

    def test_custom_order_unknown_and_duplicates(self):
        s = _settings(
            groq_api_key="g",
            gemini_api_key="m",
            llm_provider_order=["gemini", "openai", "Groq", "gemini"],
        )
        providers = build_providers(s)
        assert [type(p) for p in providers] == [GeminiProvider, GroqProvider]

    def test_no_credentials_means_empty_list(self):
        assert build_providers(_settings()) == []

    def test_orchestrator_uses_configured_providers(self):
        orchestrator = build_orchestrator(_settings(groq_api_key="g", groq_model="llama-test"))
        assert orchestrator.provider_names == ["Groq (llama-test)"]
