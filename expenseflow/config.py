import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'expenseflow.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", 7 * 24 * 3600))
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # import uploads
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 100
    MAX_TRANSACTION_AMOUNT = 1_000_000

    # Budget classification policy
    BUDGET_INCOME_GOOD_RATIO = 0.8
    BUDGET_INCOME_WARNING_RATIO = 0.5
    BUDGET_CATEGORY_WARNING_PERCENT = 80
