"""Configuration management using Pydantic Settings"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Ollama endpoint
    ollama_base_url: str = "http://localhost:11434"
    vision_model: str = "qwen2.5vl:7b"  # Document extraction
    reasoning_model: str = "deepseek-r1:8b"  # Credit recommendation

    # HTTP Client
    model_timeout_seconds: float = 180.0  # Reasoning model can take minutes
    health_timeout_seconds: float = 5.0

    # File handling
    upload_dir: str = "./uploads"
    work_dir: str = "./temp"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_files_per_upload: int = 10

    # Service
    service_name: str = "credit-assessor"
    log_level: str = "INFO"


settings = Settings()


@dataclass(frozen=True)
class ModelConfig:
    """Model endpoint configuration handed to clients and the analyzer"""

    base_url: str
    vision_model: str
    reasoning_model: str
    timeout_seconds: float
    health_timeout_seconds: float = 5.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "ModelConfig":
        source = source or settings
        return cls(
            base_url=source.ollama_base_url.rstrip("/"),
            vision_model=source.vision_model,
            reasoning_model=source.reasoning_model,
            timeout_seconds=source.model_timeout_seconds,
            health_timeout_seconds=source.health_timeout_seconds,
        )
