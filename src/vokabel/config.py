import os
from typing import Optional


def _env(name: str, default: str) -> str:
    return os.environ.get(f"VOKABEL_{name}", default)


def _env_flag(name: str, default: bool = False) -> bool:
    return _env(name, "1" if default else "0").lower() in ("1", "true", "yes", "on")


def _env_seed() -> Optional[int]:
    raw = _env("RANDOM_SEED", "")
    return int(raw) if raw.strip() else None


SHEET_ID = "1j1YiF4Vj33guXhIJm1DkJDUJQX_HNKPDUSmNrpooADw"
SHEET_EXPORT_URL = f"https://docs.google.com/spreadsheets/d/{SHEET_ID}/export?format=csv"


class Settings:
    PROJECT_NAME: str = "vokabel"
    DEBUG: bool = _env_flag("DEBUG")
    LOG_DIR: str = _env("LOG_DIR", "log")
    LOG_FILE: str = _env("LOG_FILE", "vokabel.log")
    LOG_TO_DB: bool = _env_flag("LOG_TO_DB")
    DB_DIR: str = _env("DB_DIR", "db")
    DB_FILE: str = _env("DB_FILE", "vokabel.db")
    NOUNS_CSV_URL: str = _env("NOUNS_CSV_URL", f"{SHEET_EXPORT_URL}&gid=0")
    VERBS_CSV_URL: str = _env("VERBS_CSV_URL", f"{SHEET_EXPORT_URL}&gid=1459632609")
    # "A": full conjugation table, "B": one person per row
    VERB_SCHEMA: str = _env("VERB_SCHEMA", "A").upper()
    FETCH_TIMEOUT: float = float(_env("FETCH_TIMEOUT", "10"))
    RANDOM_SEED: Optional[int] = _env_seed()
    OPTION_COUNT: int = int(_env("OPTION_COUNT", "4"))
    SESSION_COOKIE_NAME: str = "practice_session_id"
    SESSION_TIMEOUT_MINUTES: int = int(_env("SESSION_TIMEOUT_MINUTES", "120"))
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
