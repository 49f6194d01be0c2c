"""
Demo login gate: one admin account configured through the environment.
"""
import hmac
import os
from typing import Dict, Optional

from dotenv import load_dotenv

load_dotenv()

ADMIN_USERNAME = os.getenv("CODELENSE_ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("CODELENSE_ADMIN_PASSWORD", "Admin@123")
ADMIN_FULL_NAME = os.getenv("CODELENSE_ADMIN_NAME", "CodeLense Admin")
ADMIN_EMAIL = os.getenv("CODELENSE_ADMIN_EMAIL", "admin@codelense.example")


def check_credentials(username: str, password: str) -> Optional[Dict[str, str]]:
    """Return the profile {name, email} on a match, None otherwise."""
    user_ok = hmac.compare_digest((username or "").encode(), ADMIN_USERNAME.encode())
    pass_ok = hmac.compare_digest((password or "").encode(), ADMIN_PASSWORD.encode())
    if user_ok and pass_ok:
        return {"name": ADMIN_FULL_NAME, "email": ADMIN_EMAIL}
    return None
