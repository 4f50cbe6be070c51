"""Base model shared by request and response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiModel(BaseModel):
    """Pydantic model that serializes with its API aliases."""

    model_config = ConfigDict(populate_by_name=True)

    def to_api_dict(self) -> dict[str, Any]:
        """Return the payload as sent to or returned by the remote API."""
        return self.model_dump(by_alias=True, exclude_none=True)
