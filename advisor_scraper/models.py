import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


logger = logging.getLogger(__name__)


class AdvisorRecord(BaseModel):
    """A single financial advisor, normalized across sources."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    phone_no: Optional[str] = Field(None, alias="phoneNo")
    sites: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Advisor name must not be empty")
        return v

    @field_validator("email", "address", "city", "state", "phone_no")
    @classmethod
    def strip_optional(cls, v):
        if isinstance(v, str):
            v = v.strip() or None
        return v

    def to_output(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def build_record(name: Optional[str], **fields) -> Optional[AdvisorRecord]:
    """Build a record, or return None when the source gave no usable name."""
    if not name or not name.strip():
        logger.debug("Dropping advisor without a name: %s", fields.get("sites"))
        return None
    try:
        return AdvisorRecord(name=name, **fields)
    except ValidationError as e:
        logger.debug("Dropping invalid advisor %r: %s", name, e)
        return None


class SourceSettings(BaseModel):
    """Per-source tuning, fixed for the whole run."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    concurrency_limit: int = Field(20, ge=1)
    max_retries: int = Field(5, ge=0)
    timeout_ms: int = Field(30_000, gt=0)
    deadline_s: Optional[float] = Field(900.0, gt=0)


class ScraperConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    sources: Dict[str, SourceSettings]
    headless: bool = True
    output_dir: str = "results"
    merge_key: Literal["name", "name_phone"] = "name"

    @property
    def enabled_sources(self) -> List[str]:
        return [key for key, settings in self.sources.items() if settings.enabled]
