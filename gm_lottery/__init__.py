"""GM lottery package.

Modules:
  - service : registration, draw (Fisher-Yates), derived current picker, franchise claims
"""

from __future__ import annotations

from .service import claim_franchise, current_picker, draw, open_registration, register, unregister

__all__ = [
    "claim_franchise",
    "current_picker",
    "draw",
    "open_registration",
    "register",
    "unregister",
]
