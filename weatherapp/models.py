"""
ORM models.

A saved city belongs to one anonymous user id; the same user cannot save
the same city name twice.
"""

import uuid

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base


def new_city_id() -> str:
    return uuid.uuid4().hex


class City(Base):
    __tablename__ = "cities"
    __table_args__ = (UniqueConstraint("name", "user_id", name="uq_cities_name_user"),)

    # Row key; also gives lists their insertion order
    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Store-assigned public id (exposed as "_id" over HTTP)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True, default=new_city_id)

    name: Mapped[str] = mapped_column(String(255))

    # Browser-generated anonymous id; not an authentication token
    user_id: Mapped[str] = mapped_column(String(64), index=True)
