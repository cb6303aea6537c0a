from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "StoryQuest"
    debug: bool = False

    # Supabase (empty values fall back to in-memory stores)
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    generation_temperature: float = 0.6
    generation_max_output_tokens: int = 1500
    generation_top_k: int = 40
    generation_top_p: float = 0.8

    # Admission
    daily_story_limit: int = 20
    cache_expiry_days: int = 30

    # Validation
    max_generation_attempts: int = 2  # first attempt + one retry
    educational_min_score: int = 2
    young_age_max: int = 6

    # Ops
    admin_secret: str = ""
    enable_telemetry_db: bool = False

    # CORS
    frontend_url: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
