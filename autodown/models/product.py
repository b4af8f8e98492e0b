"""Product data model (the target of a take-down)."""

from datetime import datetime
from pydantic import BaseModel, Field


class Product(BaseModel):
    """A product listing owned by the catalog subsystem."""

    id: str = Field(..., description="Unique product identifier")
    name: str = Field(..., description="Product display name")
    is_valid: bool = Field(True, description="Whether the listing is live (False = taken down)")
    created_at: datetime = Field(..., description="Product creation timestamp")
    updated_at: datetime = Field(..., description="Product last update timestamp")
