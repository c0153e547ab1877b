"""
Configuration management for PresX application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

from typing import List, Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="MONGO_")

    uri: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection URI"
    )
    db_name: str = Field(default="presx", description="MongoDB database name")

    @validator("uri")
    def validate_mongo_uri(cls, v: str) -> str:
        """Validate MongoDB URI format."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MongoDB URI must start with 'mongodb://' or 'mongodb+srv://'"
            )
        return v


class AzureBlobSettings(BaseSettings):
    """Azure Blob Storage settings for recordings and uploaded files."""

    model_config = SettingsConfigDict(env_prefix="AZURE_BLOB_")

    connection_string: str = Field(
        default="", description="Azure Storage connection string"
    )
    recordings_container: str = Field(
        default="voice", description="Container for consultation recordings"
    )
    uploads_container: str = Field(
        default="uploads", description="Container for files sent to /uploads/audio"
    )
    cache_control: str = Field(
        default="max-age=3600", description="Cache-Control header for recordings"
    )


class PredictionSettings(BaseSettings):
    """Disease prediction service settings."""

    model_config = SettingsConfigDict(env_prefix="PREDICTION_")

    url: str = Field(
        default="https://medicare-4ae8.onrender.com/predict",
        description="Prediction endpoint (multipart POST)",
    )
    field_name: str = Field(
        default="custom_symptoms", description="Multipart field carrying symptoms"
    )


class TelegramSettings(BaseSettings):
    """Telegram bot relay settings."""

    model_config = SettingsConfigDict(env_prefix="TELEGRAM_")

    bot_token: str = Field(default="", description="Telegram bot token")
    chat_id: str = Field(
        default="865968884", description="Fixed recipient for prescription PDFs"
    )
    base_url: str = Field(
        default="https://api.telegram.org", description="Telegram Bot API base URL"
    )
    bot_username: str = Field(default="your_bot", description="Bot username")


class DoctorSettings(BaseSettings):
    """Static prescribing doctor information."""

    model_config = SettingsConfigDict(env_prefix="DOCTOR_")

    id: str = Field(default="default-doctor", description="Doctor identifier")
    name: str = Field(default="Dr. John Smith", description="Doctor display name")
    specialization: str = Field(default="General Medicine")
    license_number: str = Field(default="MED12345")


class PDFSettings(BaseSettings):
    """PDF rendering settings."""

    model_config = SettingsConfigDict(env_prefix="PDF_")

    format: str = Field(default="a4", description="Page format (a4 or letter)")
    orientation: str = Field(
        default="portrait", description="Page orientation (portrait or landscape)"
    )
    scale: int = Field(default=2, ge=1, le=4, description="Rasterization upscale factor")
    file_name: str = Field(default="prescription.pdf")

    @validator("format")
    def validate_format(cls, v: str) -> str:
        """Validate page format."""
        if v.lower() not in ("a4", "letter"):
            raise ValueError("PDF format must be 'a4' or 'letter'")
        return v.lower()

    @validator("orientation")
    def validate_orientation(cls, v: str) -> str:
        """Validate page orientation."""
        if v.lower() not in ("portrait", "landscape"):
            raise ValueError("PDF orientation must be 'portrait' or 'landscape'")
        return v.lower()


class RecordingSettings(BaseSettings):
    """Consultation recording settings."""

    model_config = SettingsConfigDict(env_prefix="RECORDING_")

    upload_enabled: bool = Field(
        default=False,
        description="Persist recordings to blob storage on submission",
    )
    content_type: str = Field(default="audio/webm")
    tick_seconds: float = Field(
        default=1.0, gt=0, description="Elapsed-time counter interval"
    )


class IntakeSettings(BaseSettings):
    """Open consultation session settings."""

    model_config = SettingsConfigDict(env_prefix="INTAKE_")

    session_idle_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Close consultations untouched for this long",
    )


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )
    allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS"
    )

    @validator("allowed_origins", pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string format
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [v.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")
    file_path: Optional[str] = Field(default=None, description="Log file path")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="PresX", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    azure_blob: AzureBlobSettings = Field(default_factory=AzureBlobSettings)
    prediction: PredictionSettings = Field(default_factory=PredictionSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    doctor: DoctorSettings = Field(default_factory=DoctorSettings)
    pdf: PDFSettings = Field(default_factory=PDFSettings)
    recording: RecordingSettings = Field(default_factory=RecordingSettings)
    intake: IntakeSettings = Field(default_factory=IntakeSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Override sub-settings with environment variables
        self.database = DatabaseSettings()
        self.azure_blob = AzureBlobSettings()
        self.prediction = PredictionSettings()
        self.telegram = TelegramSettings()
        self.doctor = DoctorSettings()
        self.pdf = PDFSettings()
        self.recording = RecordingSettings()
        self.intake = IntakeSettings()
        self.cors = CORSSettings()
        self.logging = LoggingSettings()

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
