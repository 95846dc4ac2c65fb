# -*- coding: utf-8 -*-
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

# numeric tokens are the payload of most lines and are never masked
_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


@dataclass(frozen=True)
class RawLogPolicy:
    """Whether input lines may appear in debug logs.

    - default: lines are logged as their length only
    - ``LINECAST_LOG_RAW=true``: the first ``preview_chars`` characters
      (``LINECAST_LOG_PREVIEW_CHARS``, default 200), e-mail addresses masked
    """
    enabled: bool
    preview_chars: int = 200

    @staticmethod
    def from_env() -> "RawLogPolicy":
        enabled = os.getenv("LINECAST_LOG_RAW", "false").lower() == "true"
        try:
            preview_chars = int(os.getenv("LINECAST_LOG_PREVIEW_CHARS", "200"))
        except ValueError:
            preview_chars = 200
        return RawLogPolicy(enabled=enabled, preview_chars=max(0, preview_chars))


def mask_emails(text: str) -> str:
    return _EMAIL_RE.sub("[REDACTED_EMAIL]", text)


def safe_raw_preview(line: str, policy: Optional[RawLogPolicy] = None) -> str:
    """Render one input line for a debug message.

    Long lines are cut and marked with the number of characters dropped, so
    a preview never passes for the whole line.
    """
    if policy is None:
        policy = RawLogPolicy.from_env()
    if not policy.enabled:
        return f"<{len(line)} chars>"
    preview = mask_emails(line[: policy.preview_chars])
    dropped = len(line) - policy.preview_chars
    if dropped > 0:
        preview += f"... (+{dropped} chars)"
    return repr(preview)
