"""
Field generators for plant records.

Each generator builds a prompt, calls the Gemini adapter once and cleans up the
answer. None of them raise: a blocked or failed call, or an empty answer, gives
the generator's fallback value.

    canonical name     -> the name typed by the user
    cultivable check   -> False
    scientific name    -> SCIENTIFIC_NAME_UNAVAILABLE
    SEO title          -> None
    article            -> None
    brief description  -> None
"""

import re
from logging import getLogger
from typing import Optional

from floragen.ai import GeminiClient, GenerationParams
from floragen.errors import GenerationError
from floragen.utils import target_language_name

logger = getLogger(__name__)

SCIENTIFIC_NAME_UNAVAILABLE = "information unavailable"

CANONICAL_NAME_PARAMS = GenerationParams(temperature=0.3, max_output_tokens=20)
CULTIVABLE_PARAMS = GenerationParams(temperature=0.1, max_output_tokens=5)
SCIENTIFIC_NAME_PARAMS = GenerationParams(temperature=0.2, max_output_tokens=20)
SEO_TITLE_PARAMS = GenerationParams(temperature=0.7, max_output_tokens=60)
ARTICLE_PARAMS = GenerationParams(temperature=0.6, max_output_tokens=3500)
BRIEF_DESCRIPTION_PARAMS = GenerationParams(temperature=0.7, max_output_tokens=100)

ARTICLE_SOURCE_LIMIT = 7500
BRIEF_DESCRIPTION_MIN = 140
BRIEF_DESCRIPTION_MAX = 160

YES_ANSWERS = {"yes", "sim", "sí", "si", "oui"}
NO_ANSWERS = {"no", "não", "nao", "non"}

# a name ending in an abbreviation such as "Dr." keeps its period
NAME_ABBREVIATION = re.compile(r"\b(St|Sr|Dr)\.$", re.IGNORECASE)
SCIENTIFIC_ABBREVIATION = re.compile(r"\b(spp|sp|var|subsp|ssp)\.$", re.IGNORECASE)

ARTICLE_SECTIONS = {
    "pt": (
        "🌱 Como Plantar {name}",
        "🔬 Nome Científico",
        "🌤️ Clima Ideal",
        "🌱 Tipo de Solo",
        "💧 Rega",
        "☀️ Luz",
        "✨ Dicas Extras de Cultivo",
    ),
    "en": (
        "🌱 How to Plant {name}",
        "🔬 Scientific Name",
        "🌤️ Ideal Climate",
        "🌱 Soil Type",
        "💧 Watering",
        "☀️ Light",
        "✨ Extra Growing Tips",
    ),
}

ARTICLE_SECTION_GUIDES = (
    "Write a clear, detailed paragraph on how to plant this species: seeds or "
    "seedlings, depth, spacing and first care.",
    'Give the most common scientific name (genus and species) for "{name}". If '
    "there are many varieties, name the main genus (e.g. Rosa spp.). If no "
    "reliable information exists, write only that the information is unavailable.",
    "Describe the ideal climate: preferred temperature range, tolerance to cold "
    "and heat, air humidity and suitable climate types.",
    'Describe the ideal soil for "{name}": drainage, pH, texture and how to '
    "prepare or amend existing soil.",
    "Give precise watering instructions: frequency by season and growth stage, "
    "amount, method, and checking soil moisture before watering again.",
    "Explain the light requirements: hours of direct sun, preferred intensity "
    "and the risks of too little or too much light.",
    "Offer 2-3 practical extra tips, such as fertilizing, pruning, propagation "
    'or preventing common pests and diseases of "{name}".',
)


def _ask(
    gemini: GeminiClient, label: str, plant_name: str, prompt: str, params: GenerationParams
) -> Optional[str]:
    """Run one generation and return the stripped text, or None on any failure."""
    try:
        text = gemini.generate(prompt, params=params)
    except GenerationError as e:
        logger.error(f"[{label}] Generation failed for '{plant_name}': {e}")
        return None
    if text is None or not text.strip():
        logger.warning(f"[{label}] Generation returned nothing for '{plant_name}'.")
        return None
    return text.strip()


def _strip_quotes(text: str) -> str:
    return re.sub(r"^[\"'\s]+|[\"'\s]+$", "", text)


def resolve_canonical_name(
    gemini: GeminiClient, user_input_name: str, language: str
) -> str:
    """Common name of the plant in the target language, or the input name."""
    language_name = target_language_name(language, fallback=None)
    prompt = f"""
The user provided the plant name "{user_input_name}".
What is the MOST USED and CORRECT common name for this plant in {language_name}?

Instructions for the answer:
1. Answer ONLY with the plant name in {language_name}.
2. For example, if the given name is 'Girasol' (the user may have typed it in Spanish) and the target language is English, the answer must be 'Sunflower'.
3. If the given name is 'Lavanda' and the target language is French, the answer must be 'Lavande'.
4. If the given name is 'Rosemary' and the target language is Brazilian Portuguese, the answer must be 'Alecrim'.
5. If you cannot confidently determine a clear common name in the target language, or the name is already correct, answer with the original name: "{user_input_name}".
6. Do not add any other word, explanation or punctuation (such as a final period, unless it is part of the name).
""".strip()

    logger.info(f"[canonical_name] Resolving '{user_input_name}' in {language_name}.")
    answer = _ask(gemini, "canonical_name", user_input_name, prompt, CANONICAL_NAME_PARAMS)
    if answer is None:
        return user_input_name

    name = _strip_quotes(answer.splitlines()[0])
    if name.endswith(".") and not NAME_ABBREVIATION.search(name):
        name = name[:-1].rstrip()
    if not name:
        logger.warning(f"[canonical_name] Empty name after cleanup, keeping '{user_input_name}'.")
        return user_input_name

    logger.info(f"[canonical_name] '{user_input_name}' -> '{name}'")
    return name


def is_cultivable_plant(gemini: GeminiClient, plant_name: str, language: str) -> bool:
    language_name = target_language_name(language, fallback=None)
    prompt = f"""
Does the term "{plant_name}" (in {language_name}) refer to a kind of plant that can be cultivated (such as a flower, fruit tree, ornamental shrub, vegetable, aromatic herb, etc.)?
Answer EXCLUSIVELY with "yes" or "no".
""".strip()

    logger.info(f"[cultivable] Checking whether '{plant_name}' ({language_name}) is a cultivable plant.")
    answer = _ask(gemini, "cultivable", plant_name, prompt, CULTIVABLE_PARAMS)
    if answer is None:
        return False

    cleaned = answer.lower().rstrip(".!").strip()
    if cleaned in YES_ANSWERS:
        return True
    if cleaned in NO_ANSWERS:
        return False
    logger.warning(f"[cultivable] Unexpected answer for '{plant_name}': {answer!r}. Assuming not cultivable.")
    return False


def _is_unavailable(text: str) -> bool:
    return text.lower().rstrip(".").strip() == SCIENTIFIC_NAME_UNAVAILABLE


def generate_scientific_name(gemini: GeminiClient, plant_name: str, language: str) -> str:
    language_name = target_language_name(language)
    prompt = f"""
Give the most common and recognized scientific name (genus and species) for the plant popularly known as "{plant_name}" (a common name in {language_name}).

RULES FOR THE ANSWER:
1. Return ONLY the scientific name in the format "Genus species" (e.g. "Solanum lycopersicum").
2. If there are several common varieties and a specific scientific name is hard to determine for "{plant_name}", give the main genus followed by "spp." (e.g. "Rosa spp.").
3. If a reliable scientific name cannot be found for "{plant_name}", answer EXACTLY with: "{SCIENTIFIC_NAME_UNAVAILABLE}".
4. Do not include any extra word, explanation or formatting.
""".strip()

    logger.info(f"[scientific_name] Looking up scientific name for '{plant_name}'.")
    answer = _ask(gemini, "scientific_name", plant_name, prompt, SCIENTIFIC_NAME_PARAMS)
    if answer is None:
        return SCIENTIFIC_NAME_UNAVAILABLE

    name = _strip_quotes(answer.splitlines()[0])
    if _is_unavailable(name):
        return SCIENTIFIC_NAME_UNAVAILABLE
    if name.endswith(".") and not SCIENTIFIC_ABBREVIATION.search(name):
        name = name[:-1].rstrip()

    if not name or not name[0].isupper():
        logger.warning(
            f"[scientific_name] '{name}' for '{plant_name}' is not in the expected format. "
            f"Using '{SCIENTIFIC_NAME_UNAVAILABLE}'."
        )
        return SCIENTIFIC_NAME_UNAVAILABLE

    logger.info(f"[scientific_name] '{plant_name}' -> '{name}'")
    return name


def generate_seo_title(gemini: GeminiClient, plant_name: str, language: str) -> Optional[str]:
    prompt = f"""
Write a blog article title about the plant "{plant_name}".
The title must:
1. Be SEO optimized.
2. Be memorable and interesting enough to attract readers.
3. Avoid generic, repetitive phrases such as "How to care for", "Learn more about", "Complete guide".
4. Be a bit more descriptive than the plant name alone, hinting at what the reader will learn or discover.
5. Be written in the language "{language}".

Examples of titles I do NOT want:
- Butterfly Orchid
- Guide to Roses
- Learn more about Succulents

Examples of titles I want:
- Unveiling the Secrets of Growing the Butterfly Orchid
- Vibrant Roses: Essential Tips for a Blooming Garden
- Succulents for Beginners: A Practical Guide to Care and Types

Generate only the title, without any introduction or additional text.
""".strip()

    logger.info(f"[seo_title] Generating title for '{plant_name}' ({language}).")
    answer = _ask(gemini, "seo_title", plant_name, prompt, SEO_TITLE_PARAMS)
    if answer is None:
        return None
    title = _strip_quotes(answer.splitlines()[0])
    return title or None


def article_headings(plant_name: str, language: str):
    key = "pt" if language.lower().startswith("pt") else "en"
    return [heading.format(name=plant_name) for heading in ARTICLE_SECTIONS[key]]


def generate_article(
    gemini: GeminiClient, plant_name: str, title: Optional[str], language: str
) -> Optional[str]:
    language_name = target_language_name(language)
    sections = "\n\n".join(
        f"{heading}\n[{guide.format(name=plant_name)}]"
        for heading, guide in zip(article_headings(plant_name, language), ARTICLE_SECTION_GUIDES)
    )
    prompt = f"""
Write an informative, practical article teaching how to plant and care for the plant "{plant_name}", whose main title for context is "{title or plant_name}".
Follow STRICTLY this section structure and format:

{sections}

ABSOLUTELY MANDATORY FORMATTING RULES:
1. Use EXACTLY the section headings given above, including the emojis and the plant name where shown.
2. Separate EACH section (heading + its paragraph(s)) from the next by EXACTLY one blank line.
3. Write ALL content as plain text. Do NOT use any HTML, Markdown (no **, _, *, -, #, 1.), bullet points or numbering. Only plain paragraphs.
4. Do NOT include an overall title at the start, nor an introduction or conclusion. Start directly with the first section and end after the last one.
5. Write all the text in {language_name}, in clear, objective and accessible language, even for technical terms.
""".strip()

    logger.info(f"[article] Generating article for '{plant_name}' in {language_name}.")
    article = _ask(gemini, "article", plant_name, prompt, ARTICLE_PARAMS)
    if article is not None:
        logger.info(f"[article] Article for '{plant_name}' generated ({len(article)} chars).")
    return article


def generate_brief_description(
    gemini: GeminiClient, plant_name: str, article: str, language: str
) -> Optional[str]:
    language_name = target_language_name(language)
    source = article[:ARTICLE_SOURCE_LIMIT]
    prompt = f"""
Based on the following article about the plant "{plant_name}", write a concise, SEO-optimized meta description.

RULES AND GOALS FOR THE DESCRIPTION:
1. Language: {language_name}.
2. Length: ideally between {BRIEF_DESCRIPTION_MIN} and {BRIEF_DESCRIPTION_MAX} characters. Do not exceed {BRIEF_DESCRIPTION_MAX} characters.
3. Content: summarize the most important and appealing points of the article about "{plant_name}", encouraging clicks from search engines.
4. SEO: use relevant keywords someone would search for when learning how to grow "{plant_name}" or what it is used for.
5. Clarity: clear, direct and interesting enough for search snippets.
6. Format: plain text only, one sentence or two at most. No line breaks.

Reference article:
---
{source}
---

Generate ONLY the meta description.
""".strip()

    logger.info(f"[brief_description] Generating brief description for '{plant_name}' in {language_name}.")
    description = _ask(gemini, "brief_description", plant_name, prompt, BRIEF_DESCRIPTION_PARAMS)
    if description is None:
        return None

    description = " ".join(description.split())
    if len(description) < 100 or len(description) > BRIEF_DESCRIPTION_MAX + 20:
        logger.warning(
            f"[brief_description] Description for '{plant_name}' has {len(description)} characters; "
            f"ideal is {BRIEF_DESCRIPTION_MIN}-{BRIEF_DESCRIPTION_MAX}."
        )
    return description
