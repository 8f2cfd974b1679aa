import os
from pathlib import Path

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the environment win over the file.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


class Settings:
    """Runtime configuration read from environment variables."""

    def __init__(self):
        # AI provider
        self.AI_PROVIDER: str = os.getenv("AI_PROVIDER", "deepseek").lower()
        self.DEEPSEEK_API_URL: str = os.getenv("DEEPSEEK_API_URL", "http://localhost:8000/v1")
        self.DEEPSEEK_API_KEY: str = os.getenv("DEEPSEEK_API_KEY", "")
        self.DEEPSEEK_MODEL: str = os.getenv("DEEPSEEK_MODEL", "")
        self.OLLAMA_API_URL: str = os.getenv("OLLAMA_API_URL", "http://localhost:11434/v1")
        self.OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3")
        self.AI_TIMEOUT: float = float(os.getenv("AI_TIMEOUT", "30"))

        # Storage
        self.DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "data/freelancers.db"))

        # Matching
        self.MATCH_TOP_N: int = int(os.getenv("MATCH_TOP_N", "3"))

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_DIR: Path = Path(os.getenv("LOG_DIR", "logs"))

    @property
    def ai_api_url(self) -> str:
        if self.AI_PROVIDER == "ollama":
            return self.OLLAMA_API_URL
        return self.DEEPSEEK_API_URL

    @property
    def ai_api_key(self) -> str:
        # Local Ollama deployments do not use a key
        if self.AI_PROVIDER == "ollama":
            return ""
        return self.DEEPSEEK_API_KEY

    @property
    def ai_model(self) -> str:
        if self.AI_PROVIDER == "ollama":
            return self.OLLAMA_MODEL
        return self.DEEPSEEK_MODEL


def get_settings() -> Settings:
    """Snapshot of the current environment."""
    return Settings()
