from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings): # load all key=value pairs from .env
    """ Canvas and app settings"""
    APP_NAME: str = "Puzzle Flow Canvas"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = f"{BASE_DIR / 'app_errors.log'}"

    # canvas behaviour
    ZOOM_SENSITIVITY: float = 0.001 # scale change per wheel delta unit
    MIN_SCALE: float = 0.1
    MAX_SCALE: float = 5.0
    GRID_SIZE: int = 40 # world units per grid cell
    SEARCH_RESULT_LIMIT: int = 5
    VIEWPORT_WIDTH: int = 1280
    VIEWPORT_HEIGHT: int = 800
    BACKGROUND_DRAG_PANS: bool = False # left drag on background pans instead of marquee

    model_config = SettingsConfigDict(
        env_file = BASE_DIR/".env",
        env_file_encoding = "utf-8",
        extra = "ignore",
    )

settings = Settings()
