"""
CRUD functions for saved cities.

Kept apart from main.py so routes only deal with request/response shapes
and these functions can be tested against a plain Session.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .logging_config import get_logger

logger = get_logger(__name__)


class DuplicateCityError(Exception):
    """Raised when (name, user_id) is already saved."""


def list_cities(db: Session, user_id: str) -> List[models.City]:
    """All cities saved by one user, oldest first."""
    return (
        db.query(models.City)
        .filter(models.City.user_id == user_id)
        .order_by(models.City.pk)
        .all()
    )


def create_city(db: Session, name: str, user_id: str) -> models.City:
    """
    Persist a city for a user.

    The unique constraint on (name, user_id) is the source of truth for
    duplicates; a violation rolls the session back and raises.
    """
    city = models.City(name=name, user_id=user_id)
    db.add(city)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("city_duplicate", name=name, user_id=user_id)
        raise DuplicateCityError(name) from e
    db.refresh(city)
    logger.info("city_saved", city_id=city.id, user_id=user_id)
    return city


def delete_city(db: Session, city_id: str, user_id: str) -> bool:
    """
    Delete a city only if it belongs to `user_id`.

    Returns False when no such city exists for that owner; callers treat
    "missing" and "not yours" the same way.
    """
    city = (
        db.query(models.City)
        .filter(models.City.id == city_id, models.City.user_id == user_id)
        .first()
    )
    if city is None:
        return False
    db.delete(city)
    db.commit()
    logger.info("city_deleted", city_id=city_id, user_id=user_id)
    return True
