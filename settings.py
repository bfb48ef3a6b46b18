"""
Application settings

Everything is read from the environment. A local .env file is loaded first
so development does not need exported variables.
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


API_TITLE = os.getenv("API_TITLE", "Storefront API")

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

# Auth tokens are issued by the identity provider, we only verify them
AUTH_SECRET = os.getenv("AUTH_SECRET", "change-me")
AUTH_AUDIENCE = os.getenv("AUTH_AUDIENCE") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))

# Quantity an admin "back in stock" toggle sets
RESTOCK_QUANTITY = int(os.getenv("RESTOCK_QUANTITY", 10))


def get_allowed_origins() -> List[str]:
    """Parse ALLOWED_ORIGINS (comma-separated, or "*") into a list"""
    origins = os.getenv("ALLOWED_ORIGINS", "*")
    if origins.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in origins.split(",") if origin.strip()]
