from typing import Any

from pydantic import BaseModel


class BaseModelWithMethods(BaseModel):
    """Base model for wpbridge configs, filters and payloads."""

    def compact_dict(self, exclude: set[str] | None = None, **kwargs: Any) -> dict[str, Any]:
        """Dump without None fields, the shape query strings and request bodies take."""
        return self.model_dump(exclude_none=True, exclude=exclude, **kwargs)
