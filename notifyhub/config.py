from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HubConfig(BaseModel):
    """NotificationHub behaviour switches"""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    # label used in log records and recorder file names
    name: str = Field(default="hub", min_length=1)

    # reject non-callable handlers and empty kinds at subscribe time
    validate_handlers: bool = True

    log_failures: bool = True
    record_timings: bool = True

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        if any(sep in v for sep in ("/", "\\")):
            raise ValueError("name must not contain path separators")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """
        Export config to a JSON-serializable dict.
        """
        return self.model_dump(mode="python")

    def to_json(
        self,
        indent: int = 2,
        ensure_ascii: bool = False,
    ) -> str:
        return json.dumps(
            self.to_dict(),
            indent=indent,
            ensure_ascii=ensure_ascii,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> HubConfig:
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, s: str) -> HubConfig:
        return cls.from_dict(json.loads(s))


def get_default_config() -> HubConfig:
    """Get default hub configuration"""
    return HubConfig()


def get_lenient_config() -> HubConfig:
    """Accept any handler value at subscribe time; failures surface at publish."""
    return HubConfig(validate_handlers=False)
