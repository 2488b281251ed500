from __future__ import annotations

import os

# settings are loaded at import time; seed them before any src.app module is imported
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test-key")
os.environ.setdefault("GEMINI_API_KEY", "gemini-test-key")
