import os
from dataclasses import dataclass


@dataclass
class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "BizTrack")
    ENV: str = os.getenv("BIZTRACK_ENV", "dev").lower()  # dev|stage|prod
    DEBUG: bool = os.getenv("DEBUG", "").lower() in {"1", "true", "yes"} or os.getenv("BIZTRACK_ENV", "dev").lower() != "prod"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS") or "12")

    def __post_init__(self):
        base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
        data_dir = os.getenv("BIZTRACK_DATA_DIR") or os.path.join(base_dir, "data")
        os.makedirs(data_dir, exist_ok=True)
        db_name = f"biztrack_{self.ENV}.sqlite3"
        self.DATA_DIR = data_dir
        self.DB_PATH = os.path.join(data_dir, db_name)
        self.DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{self.DB_PATH}"


# singleton settings
settings = Settings()

# Back-compat for modules importing DATABASE_URL directly
DATABASE_URL = settings.DATABASE_URL

# Single display format for money (Zambian kwacha)
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL") or "K"
