"""Validation and canonicalization of a new plant request.

validate_plant() either returns a PlantDraft or raises BadInput / Conflict /
InternalError. Steps, in order:

1. name and language must be present and non-blank
2. resolve the canonical name (best effort, falls back to the typed name)
3. reject names the model does not consider cultivable plants
4. reject a (canonical name, language) pair that already exists
5. look up the scientific name when the caller did not send one

Steps 2, 3 and 5 need Gemini and are skipped when no API key is configured.
"""

from dataclasses import dataclass, field
from logging import getLogger
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from floragen import generators
from floragen.ai import GeminiClient
from floragen.crud import plant as plant_crud
from floragen.errors import BadInput, Conflict, InternalError
from floragen.models import PlantCreate

logger = getLogger(__name__)

PASS_THROUGH_FIELDS = ("title", "slug", "content", "brief_description")


@dataclass
class PlantDraft:
    name: str
    language: str
    scientific_name: Optional[str] = None
    # only the fields present in the request body; a value may be None
    supplied: dict = field(default_factory=dict)

    def is_supplied(self, key: str) -> bool:
        return key in self.supplied


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_plant(db: Session, gemini: GeminiClient, payload: PlantCreate) -> PlantDraft:
    if _blank(payload.name) or _blank(payload.language):
        raise BadInput("Missing required fields: name, language")

    user_input_name = payload.name.strip()
    language = payload.language.strip()

    canonical_name = user_input_name
    if gemini.available:
        canonical_name = generators.resolve_canonical_name(gemini, user_input_name, language)
        if _blank(canonical_name):
            canonical_name = user_input_name
        canonical_name = canonical_name.strip()
    else:
        logger.warning("GEMINI_API_KEY not configured. Using the input name as canonical name.")

    if gemini.available:
        if not generators.is_cultivable_plant(gemini, canonical_name, language):
            logger.warning(f"'{canonical_name}' was not recognized as a cultivable plant.")
            raise BadInput(
                f"The term '{canonical_name}' does not seem to be a cultivable plant. "
                "Please enter a valid plant name."
            )
        logger.info(f"'{canonical_name}' accepted as a cultivable plant.")
    else:
        logger.warning("GEMINI_API_KEY not configured. Skipping the cultivable plant check.")

    try:
        existing = plant_crud.find_by_name_and_language(db, canonical_name, language)
    except SQLAlchemyError as e:
        logger.error(f"Failed to check for an existing plant '{canonical_name}': {e}")
        raise InternalError("Internal error while checking whether the plant exists.") from e
    if existing is not None:
        logger.warning(
            f"Plant '{canonical_name}' ({language}) already exists with ID {existing.id}."
        )
        raise Conflict(f"Plant with name '{canonical_name}' and language '{language}' already exists.")

    scientific_name = None if _blank(payload.scientific_name) else payload.scientific_name.strip()
    if scientific_name is None:
        if gemini.available:
            scientific_name = generators.generate_scientific_name(gemini, canonical_name, language)
        else:
            logger.warning("GEMINI_API_KEY not configured. Skipping scientific name lookup.")

    supplied = {
        key: getattr(payload, key)
        for key in PASS_THROUGH_FIELDS
        if key in payload.model_fields_set
    }

    logger.info(f"Validation passed for canonical name '{canonical_name}'.")
    return PlantDraft(
        name=canonical_name,
        language=language,
        scientific_name=scientific_name,
        supplied=supplied,
    )
