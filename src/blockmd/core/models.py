"""Input data models: block snapshots, inline deltas, and per-flavour props"""

from enum import Enum
from typing import Any, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from blockmd.errors import MalformedBlock


class Flavour(str, Enum):
    """Closed set of block flavours the converter knows about."""
    page     = "affine:page"
    note     = "affine:note"
    surface  = "affine:surface"
    frame    = "affine:frame"
    paragraph = "affine:paragraph"
    list     = "affine:list"
    code     = "affine:code"
    divider  = "affine:divider"
    image    = "affine:image"
    embed    = "affine:embed"
    database = "affine:database"
    unknown  = "unknown"

    @classmethod
    def of(cls, value: Any) -> "Flavour":
        """Map a wire flavour string to a member; anything unrecognized is Flavour.unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.unknown


CONTAINER_FLAVOURS = {Flavour.note, Flavour.surface, Flavour.frame}


class BlockSnapshot(BaseModel):
    """One node of the document block tree."""
    model_config = ConfigDict(extra="allow")

    id:       str
    flavour:  str
    props:    dict[str, Any] = Field(default_factory=dict)
    children: list["BlockSnapshot"] = Field(default_factory=list)

    @field_validator("props", mode="before")
    @classmethod
    def _none_props(cls, v):
        return v if v is not None else {}

    @field_validator("children", mode="before")
    @classmethod
    def _none_children(cls, v):
        return v if v is not None else []


class DeltaAttributes(BaseModel):
    """Character-level style flags of an inline run."""
    model_config = ConfigDict(extra="ignore")

    bold:      Optional[bool] = None
    italic:    Optional[bool] = None
    strike:    Optional[bool] = None
    underline: Optional[bool] = None
    code:      Optional[bool] = None
    link:      Optional[str] = None


class Delta(BaseModel):
    """A text fragment plus its style attributes."""
    insert:     str = ""
    attributes: DeltaAttributes = Field(default_factory=DeltaAttributes)

    @field_validator("attributes", mode="before")
    @classmethod
    def _none_attributes(cls, v):
        return v if v is not None else {}


def read_deltas(value: Any) -> list[Delta]:
    """Normalize a text prop into a delta list.

    Accepts the snapshot text envelope ``{"delta": [...]}``, a bare list of
    runs, or a plain string. Anything else degrades to an empty list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [Delta(insert=value)] if value else []
    if isinstance(value, dict):
        value = value.get("delta", [])
    if not isinstance(value, list):
        logger.warning(f"Unreadable text value of type {type(value).__name__}; using empty text")
        return []
    deltas = []
    for item in value:
        try:
            deltas.append(Delta.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping malformed delta {item!r}: {e.error_count()} error(s)")
    return deltas


class _Props(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TextProps(_Props):
    text: list[Delta] = Field(default_factory=list)

    @field_validator("text", mode="before")
    @classmethod
    def _deltas(cls, v):
        return read_deltas(v)


class ParagraphProps(TextProps):
    type: Optional[str] = "text"


class ListProps(TextProps):
    type:    Optional[str] = "bulleted"
    checked: Optional[bool] = None


class CodeProps(TextProps):
    language: Optional[str] = None


class ImageProps(_Props):
    source_id: str = Field(default="", alias="sourceId")
    width:     Optional[float] = None
    height:    Optional[float] = None
    caption:   Optional[str] = None


class EmbedProps(ImageProps):
    type: str = ""


class PageProps(_Props):
    title: list[Delta] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _deltas(cls, v):
        return read_deltas(v)


class SelectOption(_Props):
    id:    str
    value: str = ""
    color: Optional[str] = None


class ColumnData(_Props):
    options: list[SelectOption] = Field(default_factory=list)


class Column(_Props):
    id:   str
    name: str = ""
    type: str = "rich-text"
    data: ColumnData = Field(default_factory=ColumnData)

    @field_validator("data", mode="before")
    @classmethod
    def _none_data(cls, v):
        return v if v is not None else {}


class Cell(_Props):
    column_id: Optional[str] = Field(default=None, alias="columnId")
    value:     Any = None


class DatabaseProps(_Props):
    title:   list[Delta] = Field(default_factory=list)
    columns: list[Column] = Field(default_factory=list)
    cells:   dict[str, dict[str, Cell]] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def _deltas(cls, v):
        return read_deltas(v)


P = TypeVar("P", bound=_Props)


def read_props(block: BlockSnapshot, model: type[P]) -> P:
    """Validate a block's props against model, raising MalformedBlock on failure."""
    try:
        return model.model_validate(block.props)
    except ValidationError as e:
        raise MalformedBlock(block.id, block.flavour, f"{e.error_count()} invalid prop(s)") from e
