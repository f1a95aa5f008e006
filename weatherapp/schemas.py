"""
Pydantic schemas.

Defines the JSON contract of the REST endpoints. Field names on the wire
follow the browser client (camelCase, "_id"); Python attributes stay
snake_case through aliases.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CityCreate(BaseModel):
    """
    Payload for saving a city. Both fields are optional at the schema
    level so the route can answer 400 with its own message.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")


class CityDelete(BaseModel):
    """Payload for deleting a saved city (scoped by owner)."""
    model_config = ConfigDict(populate_by_name=True)

    city_id: Optional[str] = Field(None, alias="cityId")
    user_id: Optional[str] = Field(None, alias="userId")


class CityOut(BaseModel):
    """Saved-city record as returned by the API."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    name: str
    user_id: str = Field(..., serialization_alias="userId")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)
