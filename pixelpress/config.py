"""Configuration management for Pixelpress."""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration."""

    # Application
    PORT: int = int(os.getenv("PORT", "7675"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    BIND_HOST: str = os.getenv("BIND_HOST", "127.0.0.1")
    BIND_PORT: int = int(os.getenv("BIND_PORT", str(PORT)))

    # Uploads
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    # Resize parameter bounds
    MIN_DIMENSION: int = 1
    MAX_DIMENSION: int = int(os.getenv("MAX_DIMENSION", "10000"))
    MIN_TARGET_SIZE: int = 1024  # 1 KB
    MAX_TARGET_SIZE: int = 100 * 1024 * 1024  # 100 MB


config = Config()
