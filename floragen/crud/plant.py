from logging import getLogger
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from floragen import models
from floragen.errors import Conflict, InternalError

logger = getLogger(__name__)


def find_by_id(db: Session, plant_id: int) -> Optional[models.Plant]:
    return db.get(models.Plant, plant_id)


def find_by_name_and_language(db: Session, name: str, language: str) -> Optional[models.Plant]:
    return db.exec(
        select(models.Plant).where(
            models.Plant.name == name.strip(),
            models.Plant.language == language,
        )
    ).first()


def find_by_slug_and_language(db: Session, slug: str, language: str) -> Optional[models.Plant]:
    return db.exec(
        select(models.Plant).where(
            models.Plant.slug == slug,
            models.Plant.language == language,
        )
    ).first()


def list_all(db: Session) -> list[models.Plant]:
    return list(db.exec(select(models.Plant).order_by(models.Plant.id)).all())


def _conflict_for(db: Session, plant: models.Plant, exclude_id: Optional[int] = None) -> Optional[Conflict]:
    """Work out which unique key a failed write collided with."""
    existing = find_by_slug_and_language(db, plant.slug, plant.language)
    if existing is not None and existing.id != exclude_id:
        return Conflict(
            f"Plant with slug '{plant.slug}' and language '{plant.language}' already exists."
        )
    existing = find_by_name_and_language(db, plant.name, plant.language)
    if existing is not None and existing.id != exclude_id:
        return Conflict(
            f"Plant with name '{plant.name}' and language '{plant.language}' already exists."
        )
    return None


def insert(db: Session, plant: models.Plant) -> models.Plant:
    logger.info(
        f"Inserting plant name='{plant.name}' slug='{plant.slug}' language='{plant.language}'"
    )
    values = models.Plant.model_validate(plant.model_dump())
    try:
        db.add(plant)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Unique constraint violated while inserting '{values.name}': {e.orig}")
        conflict = _conflict_for(db, values)
        if conflict is not None:
            raise conflict from e
        raise InternalError(f"Failed to create plant: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while inserting '{values.name}': {e}")
        raise InternalError(f"Failed to create plant: {e}") from e

    db.refresh(plant)
    logger.info(f"Plant '{plant.name}' created with ID {plant.id}.")
    return plant


def update(db: Session, plant_id: int, fields: dict) -> Optional[models.Plant]:
    plant = find_by_id(db, plant_id)
    if plant is None:
        logger.warning(f"Plant ID {plant_id} not found for update.")
        return None

    fields = {key: value for key, value in fields.items() if key != "id"}
    if not fields:
        logger.info(f"No fields given for plant ID {plant_id}; returning it unchanged.")
        return plant

    for key, value in fields.items():
        setattr(plant, key, value)
    values = models.Plant.model_validate(plant.model_dump())
    try:
        db.add(plant)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Unique constraint violated while updating plant ID {plant_id}: {e.orig}")
        conflict = _conflict_for(db, values, exclude_id=plant_id)
        if conflict is not None:
            raise conflict from e
        raise InternalError(f"Failed to update plant: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while updating plant ID {plant_id}: {e}")
        raise InternalError(f"Failed to update plant: {e}") from e

    db.refresh(plant)
    logger.info(f"Plant ID {plant_id} updated.")
    return plant


def delete(db: Session, plant_id: int) -> Optional[models.Plant]:
    plant = find_by_id(db, plant_id)
    if plant is None:
        logger.warning(f"Plant ID {plant_id} not found for deletion.")
        return None

    deleted = models.Plant.model_validate(plant.model_dump())
    try:
        db.delete(plant)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while deleting plant ID {plant_id}: {e}")
        raise InternalError(f"Failed to delete plant: {e}") from e

    logger.info(f"Plant ID {plant_id} deleted.")
    return deleted
