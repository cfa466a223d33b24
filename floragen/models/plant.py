from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from floragen import db


class PlantBase(db.BaseModel):
    id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="Plant ID, assigned on insert and never rewritten.",
    )
    name: str = Field(
        nullable=False,
        description="Canonical common name in the record's language.",
    )
    language: str = Field(
        nullable=False,
        description="Language tag, e.g. pt-BR or en-US.",
    )
    scientific_name: Optional[str] = Field(
        default=None,
        nullable=True,
        description="Binomial name, or the 'information unavailable' sentinel.",
    )
    title: Optional[str] = Field(
        default=None,
        nullable=True,
        description="SEO headline.",
    )
    brief_description: Optional[str] = Field(
        default=None,
        nullable=True,
        description="Meta description of roughly 140-160 characters.",
    )
    content: Optional[str] = Field(
        default=None,
        nullable=True,
        description="Long-form cultivation article.",
    )
    slug: str = Field(
        nullable=False,
        description="URL-safe token, unique per language.",
    )


class Plant(PlantBase, table=True):
    __tablename__ = "plants"
    __table_args__ = (
        UniqueConstraint("slug", "language", name="slug_language_unique_idx"),
        UniqueConstraint("name", "language", name="name_language_unique_idx"),
    )


class PlantCreate(SQLModel):
    """Request body of POST /plants.

    Only name and language are required, and they are checked by the validation
    stage rather than by the schema. The other fields are optional; a field left
    out of the body is generated, while a field sent as null is kept as null.
    """

    name: Optional[str] = None
    language: Optional[str] = None
    scientific_name: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None
    brief_description: Optional[str] = None


class PlantUpdate(SQLModel):
    name: Optional[str] = None
    language: Optional[str] = None
    scientific_name: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None
    brief_description: Optional[str] = None
