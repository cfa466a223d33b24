from logging import getLogger
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from sqlmodel import Session

from floragen import config, db, models
from floragen.ai import GeminiClient, GenerationParams, create_gemini_client
from floragen.config import set_logger
from floragen.crud import plant as plant_crud
from floragen.errors import (
    BadInput,
    FloraGenError,
    InternalError,
    NotFound,
    status_code_for,
)
from floragen.pipeline import PlantSynthesizer
from floragen.utils import slugify

set_logger()
logger = getLogger("uvicorn.error")


async def lifespan(app: FastAPI):
    db.create_db_and_tables()
    app.state.gemini = create_gemini_client(config.GEMINI_API_KEY, config.GEMINI_MODEL)
    yield


app = FastAPI(lifespan=lifespan)


def get_gemini(request: Request) -> GeminiClient:
    return request.app.state.gemini


def error_response(error: FloraGenError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(error),
        content={"success": False, "error": error.message},
    )


def plant_response(plant: models.Plant, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "plant": plant.model_dump(mode="json")},
    )


@app.exception_handler(FloraGenError)
async def handle_floragen_error(request: Request, exc: FloraGenError):
    if status_code_for(exc) >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        logger.error(f"{request.method} {request.url.path}: malformed JSON body.")
        return error_response(InternalError("Malformed JSON in request body."))
    if any(error.get("loc", ())[:1] == ("path",) for error in errors):
        return error_response(BadInput("Invalid plant ID"))

    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ())[1:]) or 'body'}: {error.get('msg')}"
        for error in errors
    )
    logger.warning(f"{request.method} {request.url.path}: invalid request ({details}).")
    return error_response(BadInput(f"Invalid request: {details}"))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error."},
    )


@app.get("/", response_class=PlainTextResponse)
def index():
    return "Hello from the FloraGen plants API!"


@app.get("/plants")
def list_plants(session: Session = Depends(db.get_db)):
    plants = plant_crud.list_all(session)
    return {
        "success": True,
        "plants": [plant.model_dump(mode="json") for plant in plants],
    }


@app.get("/plants/{plant_id}")
def get_plant(plant_id: int, session: Session = Depends(db.get_db)):
    plant = plant_crud.find_by_id(session, plant_id)
    if plant is None:
        raise NotFound("Plant not found")
    return plant_response(plant)


@app.post("/plants")
def create_plant(
    payload: models.PlantCreate,
    session: Session = Depends(db.get_db),
    gemini: GeminiClient = Depends(get_gemini),
):
    plant = PlantSynthesizer(gemini).create(session, payload)
    return plant_response(plant, status_code=201)


@app.put("/plants/{plant_id}")
def update_plant(
    plant_id: int,
    payload: models.PlantUpdate,
    session: Session = Depends(db.get_db),
):
    if plant_crud.find_by_id(session, plant_id) is None:
        raise NotFound("Plant not found")

    fields = payload.model_dump(exclude_unset=True)
    for key in ("name", "language", "slug"):
        if key not in fields:
            continue
        value = fields[key]
        if value is None or not value.strip():
            raise BadInput(f"Field '{key}' cannot be empty.")
        fields[key] = value.strip()
    for key in ("title", "scientific_name"):
        if key in fields and fields[key] is not None and not fields[key].strip():
            fields[key] = None
    if "slug" in fields:
        fields["slug"] = slugify(fields["slug"])
        if not fields["slug"]:
            raise BadInput("Field 'slug' does not contain any usable characters.")

    plant = plant_crud.update(session, plant_id, fields)
    if plant is None:
        raise NotFound("Plant not found")
    return plant_response(plant)


@app.delete("/plants/{plant_id}")
def delete_plant(plant_id: int, session: Session = Depends(db.get_db)):
    plant = plant_crud.delete(session, plant_id)
    if plant is None:
        raise NotFound("Plant not found")
    return plant_response(plant)


class GenerateArticleRequest(BaseModel):
    prompt: Optional[str] = None
    model_name: Optional[str] = None
    generation_config: Optional[GenerationParams] = None


@app.post("/ai/generate-article")
def generate_article(
    payload: GenerateArticleRequest,
    gemini: GeminiClient = Depends(get_gemini),
):
    if payload.prompt is None or not payload.prompt.strip():
        raise BadInput("'prompt' is required and must be a non-empty string.")

    article = gemini.generate(
        payload.prompt,
        model=payload.model_name,
        params=payload.generation_config,
    )
    if not article:
        raise InternalError("Gemini returned no article content.")
    return {"success": True, "article": article}
