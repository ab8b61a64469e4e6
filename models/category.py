from datetime import datetime
from typing import List, Optional
from models.record import ApiRecord


class Category(ApiRecord):
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ImportResult(ApiRecord):
    """Outcome of an Excel import (items or categories)."""
    message: str = ""
    success: int = 0
    failed: int = 0
    duplicates: int = 0
    errors: List[str] = []

    @classmethod
    def from_response(cls, data: dict) -> "ImportResult":
        results = data.get("results") or {}
        errors = []
        for err in results.get("errors") or []:
            # Item imports report {row, message}; category imports plain strings
            if isinstance(err, dict):
                errors.append(f"Row {err.get('row')}: {err.get('message')}")
            else:
                errors.append(str(err))
        return cls(
            message=data.get("message", ""),
            success=results.get("success", 0),
            failed=results.get("failed", 0),
            duplicates=results.get("duplicates", 0),
            errors=errors,
        )
