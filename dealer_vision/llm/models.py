"""
Pydantic model describing the vehicle records the vision model returns.

Every field is free text (or absent) and any JSON value is accepted, so a
record is kept exactly as the model returned it. Only entries that are not
JSON objects fail validation.
"""

from typing import Any
from pydantic import BaseModel, ConfigDict, Field

# Models return strings, numbers, lists or objects for the same field.
FreeText = Any


class VehicleRecord(BaseModel):
    """
    One vehicle extracted from a section screenshot.

    specifications usually holds make, model, chassis, condition,
    stock_number, mileage, passenger_capacity, engine, transmission,
    fuel_type, exterior_color, location, dimensions {length, width, height}
    and features, but is not checked.
    """
    title: FreeText = None
    year: FreeText = None
    price: FreeText = Field(default=None, description="Exact price text, e.g. 'Call for Price'")
    description: FreeText = None
    specifications: FreeText = Field(default=None, description="Specification block, usually an object")

    model_config = ConfigDict(extra="allow")
