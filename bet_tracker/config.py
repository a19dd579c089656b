import os


def _csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///bet_tracker.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Categories whose result is known when the bet is entered (slot sessions).
    OUTCOME_IMMEDIATE_CATEGORIES = _csv_env("OUTCOME_IMMEDIATE_CATEGORIES", "Slots")
    # Suggestions for the category picker; the field itself stays free text.
    BET_CATEGORIES = _csv_env("BET_CATEGORIES", "Football,Tennis,Basketball,Esports,Slots")
    DEFAULT_BOOKMAKER = os.getenv("DEFAULT_BOOKMAKER", "Betclic")
    CURRENCY_LABEL = os.getenv("CURRENCY_LABEL", "PLN")

    RECENT_BETS_LIMIT = 5
    HISTORY_PER_PAGE = int(os.getenv("HISTORY_PER_PAGE", "25"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class Development(Config):
    DEBUG = True


class Production(Config):
    DEBUG = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }


class Testing(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"
