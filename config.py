import logging
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./decksy.db")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Bootstrap superuser; skipped when no password is configured
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

ANSWER_DELAY_SECONDS = float(os.getenv("ANSWER_DELAY_SECONDS", "0.5"))
STUDY_SESSION_LIMIT = int(os.getenv("STUDY_SESSION_LIMIT", "1000"))
RECENT_ACTIVITY_DAYS = int(os.getenv("RECENT_ACTIVITY_DAYS", "7"))
MAX_IMPORT_BYTES = int(os.getenv("MAX_IMPORT_BYTES", str(1024 * 1024)))
HOME_RECENT_SETS = 6

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=os.getenv("LOG_LEVEL", "INFO").upper()
)
