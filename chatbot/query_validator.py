from __future__ import annotations

import re
from typing import Any


PROHIBITED_KEYWORDS = {
    "create",
    "merge",
    "delete",
    "detach",
    "set",
    "remove",
    "drop",
    "foreach",
    "call",
    "load csv",
}

LABEL_RE = re.compile(r"[(\[]\s*\w*\s*:\s*(\w+)")
PARAM_RE = re.compile(r"\$(\w+)")


class QueryValidationError(ValueError):
    pass


class QueryGuardrails:
    def __init__(self, allowed_labels: set[str], max_rows: int):
        self.allowed_labels = allowed_labels
        self.max_rows = max_rows

    def validate_and_rewrite(self, query: str, params: dict[str, Any] | None = None) -> str:
        cleaned = query.strip().rstrip(";")
        lowered = cleaned.lower()

        for keyword in sorted(PROHIBITED_KEYWORDS):
            if re.search(rf"\b{re.escape(keyword)}\b", lowered):
                raise QueryValidationError(f"Prohibited keyword detected: {keyword}")

        if not re.search(r"\breturn\b", lowered):
            raise QueryValidationError("Only queries with a RETURN clause are allowed.")

        labels = set(LABEL_RE.findall(cleaned))
        invalid_labels = labels - self.allowed_labels
        if invalid_labels:
            raise QueryValidationError(f"Query references disallowed labels: {sorted(invalid_labels)}")

        if params is not None:
            missing = set(PARAM_RE.findall(cleaned)) - set(params)
            if missing:
                raise QueryValidationError(f"Query references unbound parameters: {sorted(missing)}")

        if not re.search(r"\blimit\b", lowered):
            cleaned = f"{cleaned}\nLIMIT {self.max_rows}"

        return cleaned
