from typing import Optional

import bleach


def clean_text(value: Optional[str], *, max_length: int, field: str = "Value") -> Optional[str]:
    """Strip markup and surrounding whitespace; empty strings become None."""
    if value is None:
        return value
    sanitized = bleach.clean(value, tags=[], attributes={}, strip=True).strip()
    if len(sanitized) > max_length:
        raise ValueError(f"{field} too long (max {max_length} chars)")
    return sanitized or None
