import os

CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")

DEFAULT_API_BASE_URL = os.getenv("DASHBOARD_API_BASE_URL", "https://ignicult.com/api")
