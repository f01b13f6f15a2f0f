"""
Cookbook Configuration
"""

import os
from dotenv import load_dotenv
from supabase import create_client, Client

# Load environment variables
load_dotenv()

# OpenRouter Configuration
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
OPENROUTER_BASE_URL = os.getenv(
    "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1/chat/completions"
)
LLM_MODEL = os.getenv("LLM_MODEL", "google/gemini-flash-1.5")

# LLM Settings
LLM_TEMPERATURE = 0.2
LLM_MAX_TOKENS = 2000
LLM_TIMEOUT = 30

# Keyword extraction retries on an overloaded upstream only
KEYWORD_MAX_ATTEMPTS = 3

# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

# OCR
OCR_LANG = os.getenv("OCR_LANG", "eng")

# CORS - Frontend URLs
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    os.getenv("FRONTEND_URL", ""),  # Production frontend URL
]
# Filter empty strings
CORS_ORIGINS = [origin for origin in CORS_ORIGINS if origin]

# Recipe categories (fixed vocabulary)
RECIPE_CATEGORIES = [
    "breakfast", "snacks", "lunch", "appetizers",
    "dinner", "dessert", "sauce", "misc"
]


def get_supabase_client() -> Client:
    """Create a Supabase client using env vars."""
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise RuntimeError(
            "Supabase is not configured. "
            "Please set SUPABASE_URL and SUPABASE_ANON_KEY in your .env file."
        )
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)
