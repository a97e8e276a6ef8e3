import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "changeme")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")

# order-processing backend (orders, coupons, bulk orders, uploads)
API_URL = (os.getenv("API_URL") or os.getenv("NEXT_PUBLIC_API_URL") or "http://localhost:5000").rstrip("/")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "15"))

APP_NAME = os.getenv("APP_NAME", "Storefront API")
APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

SETTINGS_CACHE_TTL = float(os.getenv("SETTINGS_CACHE_TTL", "300"))  # 5 minutes
MAINTENANCE_CACHE_TTL = float(os.getenv("MAINTENANCE_CACHE_TTL", "30"))

TAX_RATE = os.getenv("TAX_RATE", "0")
FREE_DELIVERY_THRESHOLD = os.getenv("FREE_DELIVERY_THRESHOLD", "20000")


def is_production() -> bool:
    return APP_ENV.lower() == "production"
