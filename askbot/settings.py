# askbot/settings.py
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="Ask Anything")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)

    # data
    DB_PATH: str = "data/db/site.db"
    FAISS_PATH: str = "data/index/faiss.index"
    CATALOG_PATH: str | None = None
    PROJECTS_PATH: str | None = None

    # pipeline
    ADMIN_PHRASE: str = "i am joey hendrickson"
    ADMIN_REDIRECT: str = "/admin-login"
    VECTOR_TOP_K: int = 5
    MAX_WORKERS: int = 8
    HTTP_TIMEOUT: float = 30.0

    # embeddings
    EMBED_BACKEND: str = "ollama"  # ollama | openai
    EMBED_MODEL: str = "bge-m3:latest"
    OPENAI_EMBED_MODEL: str = "text-embedding-3-small"
    OLLAMA_HOST: str = "http://localhost:11434"

    # generation
    GENERATION_ENGINE: str = "auto"  # auto | gemini | openai | ollama | echo
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash-exp"
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    OLLAMA_MODEL: str = "mistral:7b-instruct"

    # read root-level .env.dev
    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
    )


settings = Settings()
