"""
Configuration model for scanners.
"""
from cassandra import ConsistencyLevel
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .settings import READ_DEFAULTS


class ReadConf(BaseModel):
    """How a Scanner pages through rows."""

    model_config = ConfigDict(frozen=True)

    fetch_size_in_rows: int = Field(
        default=READ_DEFAULTS.fetch_size_in_rows,
        ge=1,
        description="Rows fetched per page",
    )
    consistency_level: str = Field(
        default=READ_DEFAULTS.consistency_level,
        description="Consistency level name, e.g. LOCAL_ONE or QUORUM",
    )

    @field_validator("consistency_level")
    @classmethod
    def validate_consistency_level(cls, v):
        """Validate the level is one the driver knows."""
        level = v.strip().upper()
        if level not in ConsistencyLevel.name_to_value:
            valid = sorted(ConsistencyLevel.name_to_value)
            raise ValueError(f"Consistency level must be one of {valid}, got '{v}'")
        return level

    @property
    def driver_consistency_level(self) -> int:
        """Consistency level as the driver's numeric constant."""
        return ConsistencyLevel.name_to_value[self.consistency_level]
