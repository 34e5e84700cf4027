import os
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv
load_dotenv(ROOT_DIR / '.env')

class Config:
    DATABASE_URL = os.environ.get('DATABASE_URL', f"sqlite:///{ROOT_DIR / 'storefront.db'}")

    JWT_SECRET = os.environ.get('JWT_SECRET', 'storefront-orders-secret-key-2024-change-me')
    JWT_ALGORITHM = "HS256"

    # Returns are accepted this many days after delivery
    RETURN_WINDOW_DAYS = int(os.environ.get('RETURN_WINDOW_DAYS', '3'))
    ADMIN_ROLES = tuple(r.strip() for r in os.environ.get('ADMIN_ROLES', 'admin,superadmin').split(',') if r.strip())

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',')]

settings = Config()
