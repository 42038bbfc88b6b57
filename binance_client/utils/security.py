"""
Secret handling utilities.

Provides:
- Redaction of keys, secrets and request signatures in log output
- Masking of credential strings for display
"""

import re
from typing import Dict, List

# =============================================================================
# Constants
# =============================================================================

# Patterns for detecting secrets in logs
SECRET_PATTERNS = [
    re.compile(r'api[_-]?key["\']?\s*[:=]\s*["\']?[\w-]{20,}', re.IGNORECASE),
    re.compile(r'api[_-]?secret["\']?\s*[:=]\s*["\']?[\w-]{20,}', re.IGNORECASE),
    re.compile(r'X-MBX-APIKEY["\']?\s*[:=]\s*["\']?[\w-]{20,}', re.IGNORECASE),
    re.compile(r'signature=[0-9a-f]{64}', re.IGNORECASE),
    re.compile(r'listenKey["\']?\s*[:=]\s*["\']?[\w-]{20,}', re.IGNORECASE),
    re.compile(r'["\']?[\w]*secret[\w]*["\']?\s*[:=]\s*["\']?[^\s"\']{8,}', re.IGNORECASE),
]


# =============================================================================
# Log Filtering
# =============================================================================

class SecretFilter:
    """
    Filter to redact secrets from log messages.

    Usage:
        logger.add(sink, filter=SecretFilter())
    """

    def __init__(self, patterns: List[re.Pattern] = None):
        self.patterns = patterns or SECRET_PATTERNS

    def __call__(self, record: Dict) -> bool:
        """Filter log record, redacting secrets."""
        message = record.get("message", "")

        for pattern in self.patterns:
            message = pattern.sub("[REDACTED]", message)

        record["message"] = message
        return True


def redact_secrets(text: str) -> str:
    """Redact secrets from a string."""
    for pattern in SECRET_PATTERNS:
        text = pattern.sub("[REDACTED]", text)
    return text


def mask_string(s: str, visible_chars: int = 4) -> str:
    """
    Mask a string, showing only first/last few characters.

    Args:
        s: String to mask
        visible_chars: Number of chars to show at start/end

    Returns:
        Masked string like "abcd****wxyz"
    """
    if len(s) <= visible_chars * 2:
        return "*" * len(s)

    return s[:visible_chars] + "*" * (len(s) - visible_chars * 2) + s[-visible_chars:]
