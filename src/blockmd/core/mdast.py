"""Markdown-AST node models produced by the walker and consumed by the serializer.

Node names and fields follow the mdast vocabulary (``root``, ``paragraph``,
``listItem`` ...) so dumped trees read like any other Markdown syntax tree.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


# === PHRASING (INLINE) ===


class Text(BaseModel):
    type: Literal["text"] = "text"
    value: Optional[str] = ""


class InlineCode(BaseModel):
    type: Literal["inlineCode"] = "inlineCode"
    value: str


class Strong(BaseModel):
    type: Literal["strong"] = "strong"
    children: list["PhrasingContent"] = Field(default_factory=list)


class Emphasis(BaseModel):
    type: Literal["emphasis"] = "emphasis"
    children: list["PhrasingContent"] = Field(default_factory=list)


class Delete(BaseModel):
    type: Literal["delete"] = "delete"
    children: list["PhrasingContent"] = Field(default_factory=list)


class Link(BaseModel):
    type: Literal["link"] = "link"
    url: str
    title: Optional[str] = None
    children: list["PhrasingContent"] = Field(default_factory=list)


class Image(BaseModel):
    type: Literal["image"] = "image"
    url: str
    title: Optional[str] = None
    alt: Optional[str] = None


PhrasingContent = Union[Text, InlineCode, Strong, Emphasis, Delete, Link, Image]


# === FLOW (BLOCK) ===


class Paragraph(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    children: list[PhrasingContent] = Field(default_factory=list)


class Heading(BaseModel):
    type: Literal["heading"] = "heading"
    depth: int = Field(ge=1, le=6)
    children: list[PhrasingContent] = Field(default_factory=list)


class Code(BaseModel):
    type: Literal["code"] = "code"
    lang: Optional[str] = None
    meta: Optional[str] = None
    value: str = ""


class ThematicBreak(BaseModel):
    type: Literal["thematicBreak"] = "thematicBreak"


class Blockquote(BaseModel):
    type: Literal["blockquote"] = "blockquote"
    children: list["FlowContent"] = Field(default_factory=list)


class ListItem(BaseModel):
    type: Literal["listItem"] = "listItem"
    checked: Optional[bool] = None
    spread: bool = False
    children: list["FlowContent"] = Field(default_factory=list)


class List(BaseModel):
    type: Literal["list"] = "list"
    ordered: bool = False
    start: Optional[int] = None
    spread: bool = False
    children: list[ListItem] = Field(default_factory=list)


class TableCell(BaseModel):
    type: Literal["tableCell"] = "tableCell"
    children: list[PhrasingContent] = Field(default_factory=list)


class TableRow(BaseModel):
    type: Literal["tableRow"] = "tableRow"
    children: list[TableCell] = Field(default_factory=list)


class Table(BaseModel):
    type: Literal["table"] = "table"
    align: Optional[list[Optional[str]]] = None
    children: list[TableRow] = Field(default_factory=list)


FlowContent = Union[Paragraph, Heading, Code, ThematicBreak, Blockquote, List, Table]


class Root(BaseModel):
    type: Literal["root"] = "root"
    children: list[FlowContent] = Field(default_factory=list)


# Node types that may hold children on the open-node stack
Parent = Union[Root, Paragraph, Heading, Blockquote, List, ListItem, Table, TableRow, TableCell,
               Strong, Emphasis, Delete, Link]
MdNode = Union[Parent, Text, InlineCode, Image, Code, ThematicBreak]


# Update forward references
Strong.model_rebuild()
Emphasis.model_rebuild()
Delete.model_rebuild()
Link.model_rebuild()
Blockquote.model_rebuild()
ListItem.model_rebuild()
List.model_rebuild()
Root.model_rebuild()
