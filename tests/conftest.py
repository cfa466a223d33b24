import os
import re

# must be set before floragen.config is imported
os.environ["DB_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from floragen import db
from floragen.main import app, get_gemini

# Phrases that appear in exactly one generator prompt each
CANONICAL = "MOST USED and CORRECT common name"
CULTIVABLE = "can be cultivated"
SCIENTIFIC = "popularly known as"
TITLE = "blog article title"
ARTICLE = "teaching how to plant and care"
BRIEF = "meta description"

SAMPLE_ARTICLE = (
    "🌱 How to Plant Sunflower\nSow the seeds two centimeters deep in full sun.\n\n"
    "🔬 Scientific Name\nHelianthus annuus.\n\n"
    "🌤️ Ideal Climate\nWarm summers between 20 and 30 degrees.\n\n"
    "🌱 Soil Type\nLoose, well drained soil with a neutral pH.\n\n"
    "💧 Watering\nWater deeply once or twice a week.\n\n"
    "☀️ Light\nAt least six hours of direct sun per day.\n\n"
    "✨ Extra Growing Tips\nStake tall varieties and watch for aphids."
)
SAMPLE_BRIEF = (
    "Grow sunflowers with confidence: planting depth, ideal climate, soil, watering "
    "and light tips to get tall, healthy blooms all summer long."
)


def echo_plant_name(prompt):
    return re.search(r'plant name "([^"]+)"', prompt).group(1)


class FakeGemini:
    """Scripted stand-in for GeminiClient.

    responses maps a prompt marker to an answer. An answer can be a string,
    None, an exception to raise, or a callable taking the prompt.
    """

    def __init__(self, responses=None, available=True):
        self.responses = dict(responses or {})
        self.available = available
        self.calls = []

    def generate(self, prompt, model=None, params=None):
        self.calls.append({"prompt": prompt, "model": model, "params": params})
        for marker, answer in self.responses.items():
            if marker in prompt:
                if isinstance(answer, Exception):
                    raise answer
                if callable(answer):
                    return answer(prompt)
                return answer
        return None

    def called(self, marker):
        return sum(1 for call in self.calls if marker in call["prompt"])


@pytest.fixture
def gemini():
    return FakeGemini(
        {
            CANONICAL: echo_plant_name,
            CULTIVABLE: "yes",
            SCIENTIFIC: "Helianthus annuus",
            TITLE: "Golden Giants: Growing Sunflowers That Touch the Sky",
            ARTICLE: SAMPLE_ARTICLE,
            BRIEF: SAMPLE_BRIEF,
        }
    )


@pytest.fixture
def offline_gemini():
    """No GEMINI_API_KEY configured."""
    return FakeGemini(available=False)


@pytest.fixture
def engine():
    engine = db.make_engine("sqlite://")
    db.create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine, gemini):
    def get_test_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[db.get_db] = get_test_db
    app.dependency_overrides[get_gemini] = lambda: gemini
    yield TestClient(app)
    app.dependency_overrides.clear()
