"""
Redaction utilities to keep secrets out of logs and printed output.
"""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

SECRET_KEY_MARKERS = {
    "API_KEY", "TOKEN", "SECRET", "PASSWORD", "PASSWD", "CREDENTIAL",
}

# Common token formats (best-effort)
TOKEN_PATTERNS = [
    re.compile(r"sk-[A-Za-z0-9]{20,}"),
    re.compile(r"ghp_[A-Za-z0-9]{30,}"),
    re.compile(r"AKIA[0-9A-Z]{16}"),
]

# Short values would redact ordinary words.
MIN_SECRET_LENGTH = 4


def _is_secret_key(key: str) -> bool:
    upper = key.upper()
    return any(marker in upper for marker in SECRET_KEY_MARKERS)


def load_env_secrets(env_file: Optional[Path] = None) -> Dict[str, str]:
    """Collect secret-looking values from the environment and a .env file."""
    secrets: Dict[str, str] = {
        k: v for k, v in os.environ.items() if v and _is_secret_key(k)
    }
    env_path = env_file or Path.cwd() / ".env"
    if env_path.exists():
        for k, v in dotenv_values(str(env_path)).items():
            if v and _is_secret_key(k):
                secrets[k] = v
    return secrets


def redact_text(text: str, env_file: Optional[Path] = None) -> str:
    """Replace known secret values and token-like strings in text."""
    if not text:
        return text
    redacted = text
    for k, v in load_env_secrets(env_file).items():
        if len(v) >= MIN_SECRET_LENGTH:
            redacted = redacted.replace(v, f"{{REDACTED_{k}}}")
    for pat in TOKEN_PATTERNS:
        redacted = pat.sub("{REDACTED_TOKEN}", redacted)
    return redacted
