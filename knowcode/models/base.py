"""Shared base for records exchanged with the exam API."""
from pydantic import BaseModel, ConfigDict

# Upstream ids are UUID strings; older rows carry integers.
Identifier = int | str


class ApiModel(BaseModel):
    """Base model: ignores fields this front does not use."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
