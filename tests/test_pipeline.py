"""
tests/test_pipeline.py — Tests for end-to-end plant record synthesis.

Tests cover:
- full generation from name and language only
- title / slug / content / brief description precedence
- slug fallbacks
- creation without a Gemini API key
- persistence and conflicts
"""

import pytest

from floragen import models
from floragen.errors import (
    BadInput,
    Conflict,
    GenerationBlocked,
    GenerationFailed,
    InternalError,
)
from floragen.pipeline import PlantSynthesizer
from floragen.validation import PlantDraft

from conftest import (
    ARTICLE,
    BRIEF,
    CANONICAL,
    CULTIVABLE,
    SAMPLE_ARTICLE,
    SAMPLE_BRIEF,
    SCIENTIFIC,
    TITLE,
    FakeGemini,
)


def create(session, gemini, **payload):
    return PlantSynthesizer(gemini).create(session, models.PlantCreate(**payload))


class TestCreate:

    def test_generates_every_field(self, session):
        gemini = FakeGemini(
            {
                CANONICAL: "Sunflower",
                CULTIVABLE: "yes",
                SCIENTIFIC: "Helianthus annuus",
                TITLE: "Golden Giants: Growing Sunflowers That Touch the Sky",
                ARTICLE: SAMPLE_ARTICLE,
                BRIEF: SAMPLE_BRIEF,
            }
        )
        plant = create(session, gemini, name="Girasol", language="en-US")

        assert plant.id is not None
        assert plant.name == "Sunflower"
        assert plant.language == "en-US"
        assert plant.scientific_name == "Helianthus annuus"
        assert plant.title == "Golden Giants: Growing Sunflowers That Touch the Sky"
        assert plant.slug == "golden-giants-growing-sunflowers-that-touch-the-sky"
        assert plant.content == SAMPLE_ARTICLE
        assert plant.brief_description == SAMPLE_BRIEF

        markers = [CANONICAL, CULTIVABLE, SCIENTIFIC, TITLE, ARTICLE, BRIEF]
        assert [gemini.called(marker) for marker in markers] == [1, 1, 1, 1, 1, 1]
        order = [
            next(marker for marker in markers if marker in call["prompt"])
            for call in gemini.calls
        ]
        assert order == markers

    def test_supplied_slug_skips_title(self, session, gemini):
        plant = create(session, gemini, name="Rosa", language="pt-BR", slug="Minha Rosa!")
        assert plant.slug == "minha-rosa"
        assert plant.title is None
        assert gemini.called(TITLE) == 0
        assert gemini.called(ARTICLE) == 1

    def test_supplied_title_is_used_for_slug(self, session, gemini):
        plant = create(
            session, gemini, name="Sunflower", language="en-US", title="Sunflowers in Small Gardens"
        )
        assert plant.title == "Sunflowers in Small Gardens"
        assert plant.slug == "sunflowers-in-small-gardens"
        assert gemini.called(TITLE) == 0
        article_prompt = next(call["prompt"] for call in gemini.calls if ARTICLE in call["prompt"])
        assert '"Sunflowers in Small Gardens"' in article_prompt

    def test_supplied_empty_content_is_kept(self, session, gemini):
        plant = create(session, gemini, name="Sunflower", language="en-US", content="")
        assert plant.content == ""
        assert plant.brief_description is None
        assert gemini.called(ARTICLE) == 0
        assert gemini.called(BRIEF) == 0

    def test_supplied_null_fields_stay_null(self, session, gemini):
        payload = models.PlantCreate.model_validate(
            {"name": "Sunflower", "language": "en-US", "content": None, "brief_description": None}
        )
        plant = PlantSynthesizer(gemini).create(session, payload)
        assert plant.content is None
        assert plant.brief_description is None
        assert gemini.called(ARTICLE) == 0
        assert gemini.called(BRIEF) == 0

    def test_supplied_brief_description(self, session, gemini):
        plant = create(
            session, gemini, name="Sunflower", language="en-US", brief_description="Short and sweet."
        )
        assert plant.brief_description == "Short and sweet."
        assert gemini.called(BRIEF) == 0

    def test_failed_article_skips_brief_description(self, session):
        gemini = FakeGemini({CANONICAL: "Sunflower", CULTIVABLE: "yes", SCIENTIFIC: "Helianthus annuus"})
        plant = create(session, gemini, name="Sunflower", language="en-US")
        assert plant.title is None
        assert plant.slug == "sunflower"
        assert plant.content is None
        assert plant.brief_description is None
        assert gemini.called(BRIEF) == 0

    def test_not_cultivable(self, session):
        gemini = FakeGemini({CANONICAL: "Chair", CULTIVABLE: "no"})
        with pytest.raises(BadInput):
            create(session, gemini, name="Chair", language="en-US")
        assert gemini.called(TITLE) == 0

    def test_duplicate_name(self, session, gemini):
        create(session, gemini, name="Sunflower", language="en-US", slug="sunflower")
        with pytest.raises(Conflict) as excinfo:
            create(session, gemini, name="Sunflower", language="en-US", slug="other")
        assert "name 'Sunflower'" in excinfo.value.message

    def test_duplicate_slug(self, session, gemini):
        create(session, gemini, name="Sunflower", language="en-US", slug="garden")
        with pytest.raises(Conflict) as excinfo:
            create(session, gemini, name="Rose", language="en-US", slug="Garden")
        assert excinfo.value.message == "Plant with slug 'garden' and language 'en-US' already exists."

    def test_duplicate_slug_skips_content_generation(self, session, gemini):
        create(session, gemini, name="Sunflower", language="en-US", slug="garden")
        articles, briefs = gemini.called(ARTICLE), gemini.called(BRIEF)

        with pytest.raises(Conflict):
            create(session, gemini, name="Rose", language="en-US", slug="Garden")
        assert gemini.called(ARTICLE) == articles
        assert gemini.called(BRIEF) == briefs

    def test_duplicate_generated_title_slug(self, session, gemini):
        create(session, gemini, name="Sunflower", language="en-US")
        with pytest.raises(Conflict) as excinfo:
            create(session, gemini, name="Giant Sunflower", language="en-US")
        assert "slug 'golden-giants-growing-sunflowers-that-touch-the-sky'" in excinfo.value.message
        assert gemini.called(ARTICLE) == 1

    @pytest.mark.parametrize(
        "error",
        [GenerationFailed("503 Service Unavailable"), GenerationBlocked("SAFETY", "Unsafe prompt")],
    )
    def test_every_generation_error_still_creates(self, session, error):
        markers = [CANONICAL, CULTIVABLE, SCIENTIFIC, TITLE, ARTICLE, BRIEF]
        gemini = FakeGemini({marker: error for marker in markers})
        gemini.responses[CULTIVABLE] = "yes"

        plant = create(session, gemini, name="Sunflower", language="en-US")
        assert plant.id is not None
        assert plant.name == "Sunflower"
        assert plant.slug == "sunflower"
        assert plant.scientific_name == "information unavailable"
        assert plant.title is None
        assert plant.content is None
        assert plant.brief_description is None


class TestWithoutApiKey:

    def test_minimal_record(self, session, offline_gemini):
        plant = create(session, offline_gemini, name="Girasol", language="es-ES")
        assert plant.name == "Girasol"
        assert plant.slug == "girasol"
        assert plant.scientific_name is None
        assert plant.title is None
        assert plant.content is None
        assert plant.brief_description is None
        assert offline_gemini.calls == []

    def test_supplied_fields_are_kept(self, session, offline_gemini):
        plant = create(
            session,
            offline_gemini,
            name="Pé de Feijão",
            language="pt-BR",
            title="Feijão no Quintal",
            content="Texto",
            brief_description="Resumo",
        )
        assert plant.slug == "feijao-no-quintal"
        assert plant.content == "Texto"
        assert plant.brief_description == "Resumo"


class TestResolveSlug:

    def test_falls_back_to_name(self, gemini):
        draft = PlantDraft(name="Pé de Feijão", language="pt-BR")
        slug = PlantSynthesizer(gemini).resolve_slug(draft, None, "!!!")
        assert slug == "pe-de-feijao"

    def test_supplied_slug_without_usable_characters(self, gemini):
        draft = PlantDraft(name="Rosa", language="pt-BR")
        assert PlantSynthesizer(gemini).resolve_slug(draft, "???", "Rosas Vermelhas") == "rosas-vermelhas"

    def test_no_usable_slug(self, gemini):
        draft = PlantDraft(name="東京", language="ja-JP")
        with pytest.raises(InternalError) as excinfo:
            PlantSynthesizer(gemini).resolve_slug(draft, None, None)
        assert excinfo.value.message == "Could not determine a valid slug for the plant."
