from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # LLM Provider — l'ordine è statico: il primo è il primario
    llm_provider_order: list[str] = ["groq", "huggingface", "gemini"]
    llm_timeout_seconds: float = 30.0
    llm_temperature: float = 0.7

    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"

    huggingface_api_key: str = ""
    huggingface_model: str = "meta-llama/Llama-3.2-3B-Instruct"

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # App
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"


# Istanza globale usata in tutto il progetto
settings = Settings()
