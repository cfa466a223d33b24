from logging import getLogger
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from floragen import generators, models
from floragen.ai import GeminiClient
from floragen.crud import plant as plant_crud
from floragen.errors import Conflict, InternalError
from floragen.utils import first_successful, slugify
from floragen.validation import PlantDraft, validate_plant

logger = getLogger(__name__)


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


class PlantSynthesizer:
    """Turns a create request into a complete, unique plant record.

    The Gemini adapter is passed in by the caller; every generation call made
    while building one record runs in sequence on it.
    """

    def __init__(self, gemini: GeminiClient):
        self.gemini = gemini

    def create(self, db: Session, payload: models.PlantCreate) -> models.Plant:
        draft = validate_plant(db, self.gemini, payload)
        plant = self.synthesize(db, draft)
        # the unique constraint still decides races between two creates
        return plant_crud.insert(db, plant)

    def synthesize(self, db: Session, draft: PlantDraft) -> models.Plant:
        supplied_slug = _non_blank(draft.supplied.get("slug"))
        title = self.resolve_title(draft, supplied_slug)
        slug = self.resolve_slug(draft, supplied_slug, title)
        self.check_slug_available(db, slug, draft.language)
        content = self.resolve_content(draft, title)
        brief_description = self.resolve_brief_description(draft, content)

        return models.Plant(
            name=draft.name,
            language=draft.language,
            slug=slug,
            title=title,
            scientific_name=draft.scientific_name,
            content=content,
            brief_description=brief_description,
        )

    def resolve_title(self, draft: PlantDraft, supplied_slug: Optional[str]) -> Optional[str]:
        def generated_title():
            if supplied_slug is not None:
                logger.info("Slug supplied; skipping title generation.")
                return None
            if not self.gemini.available:
                logger.warning("GEMINI_API_KEY not configured. Skipping title generation.")
                return None
            title = generators.generate_seo_title(self.gemini, draft.name, draft.language)
            if title is None:
                logger.warning(f"Could not generate a title for '{draft.name}'. Title will be null.")
            return title

        return first_successful([
            lambda: _non_blank(draft.supplied.get("title")),
            generated_title,
        ])

    def resolve_slug(
        self, draft: PlantDraft, supplied_slug: Optional[str], title: Optional[str]
    ) -> str:
        slug = first_successful([
            lambda: slugify(supplied_slug),
            lambda: slugify(title),
            lambda: slugify(draft.name),
        ])
        if not slug:
            raise InternalError("Could not determine a valid slug for the plant.")
        logger.info(f"Slug for '{draft.name}': '{slug}'")
        return slug

    def check_slug_available(self, db: Session, slug: str, language: str):
        try:
            existing = plant_crud.find_by_slug_and_language(db, slug, language)
        except SQLAlchemyError as e:
            logger.error(f"Failed to check for an existing slug '{slug}': {e}")
            raise InternalError("Internal error while checking whether the slug exists.") from e
        if existing is not None:
            logger.warning(f"Slug '{slug}' ({language}) is already used by plant ID {existing.id}.")
            raise Conflict(f"Plant with slug '{slug}' and language '{language}' already exists.")

    def resolve_content(self, draft: PlantDraft, title: Optional[str]) -> Optional[str]:
        if draft.is_supplied("content"):
            logger.info(f"Using the supplied content for '{draft.name}'.")
            return draft.supplied["content"]
        if not self.gemini.available:
            logger.warning(f"GEMINI_API_KEY not configured. Content for '{draft.name}' will be null.")
            return None
        content = generators.generate_article(self.gemini, draft.name, title, draft.language)
        if content is None:
            logger.warning(f"Content generation failed for '{draft.name}'. Content will be null.")
        return content

    def resolve_brief_description(self, draft: PlantDraft, content: Optional[str]) -> Optional[str]:
        if draft.is_supplied("brief_description"):
            logger.info(f"Using the supplied brief description for '{draft.name}'.")
            return draft.supplied["brief_description"]
        if not content or not self.gemini.available:
            logger.warning(
                f"No content or no GEMINI_API_KEY; brief description for '{draft.name}' will be null."
            )
            return None
        return generators.generate_brief_description(self.gemini, draft.name, content, draft.language)
