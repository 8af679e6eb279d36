# config.py
import os
from dotenv import load_dotenv

# Pull values from a local .env file (if present) into the process environment.
load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Settings:
    """
    Central configuration file to store application-wide settings.
    """
    DATA_DIR: str = os.path.join(BASE_DIR, "data")
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(DATA_DIR, 'listings.db')}")
    SAMPLE_PROPERTIES_CSV: str = os.path.join(DATA_DIR, "sample_properties.csv")
    ESTIMATES_CSV: str = os.path.join(DATA_DIR, "listing_estimates.csv")

    # Remote model used for price estimation
    LLM_HOST: str = os.getenv("LLM_HOST", "http://localhost:11434")
    LLM_API_KEY: str = os.getenv("LLM_API_KEY", "")
    LLM_MODEL_NAME: str = os.getenv("LLM_MODEL_NAME", "llama3")
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 2000
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Create a single instance of the settings to be imported by other modules.
settings = Settings()
