"""
Structured content carried by churches and sermon notes.

Legacy rows keep this data as JSON serialized into a text column
(churches.description, sermon_notes.content). Newer rows may hold it in
dedicated jsonb columns (churches.location, sermon_notes.sermon_meta) with the
text column reduced to a plain caption/body. Readers accept both layouts and
never raise on malformed blobs: they fall back to treating the text as the
caption and log a warning.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sermon_buddy.config.settings import settings

logger = logging.getLogger(__name__)


class Location(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str = ""
    state: str = ""
    zip_code: str = Field(default="", alias="zipCode")


class ChurchDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str = ""
    location: Location = Field(default_factory=Location)


class SermonContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pastor_name: str = Field(default="", alias="pastorName")
    church_name: str = Field(default="", alias="churchName")
    content: str = ""
    bible_verses: List[str] = Field(default_factory=list, alias="bibleVerses")


class SermonMeta(BaseModel):
    """The non-body part of SermonContent, stored in sermon_notes.sermon_meta."""
    model_config = ConfigDict(populate_by_name=True)

    pastor_name: str = Field(default="", alias="pastorName")
    church_name: str = Field(default="", alias="churchName")
    bible_verses: List[str] = Field(default_factory=list, alias="bibleVerses")


def _drop_nulls(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_nulls(v) for k, v in value.items() if v is not None}
    return value


def _load_object(raw: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return _drop_nulls(data)


def parse_church_details(raw: Optional[str]) -> ChurchDetails:
    """Parse a church description blob; plain text becomes the description."""
    if raw is None:
        return ChurchDetails()
    data = _load_object(raw)
    if data is not None:
        try:
            return ChurchDetails.model_validate(data)
        except ValidationError:
            pass
    logger.warning("Church description is not structured JSON; using it as plain text")
    return ChurchDetails(description=raw)


def parse_sermon_content(raw: Optional[str]) -> SermonContent:
    """Parse a sermon content blob; plain text becomes the body."""
    if raw is None:
        return SermonContent()
    data = _load_object(raw)
    if data is not None:
        try:
            return SermonContent.model_validate(data)
        except ValidationError:
            pass
    logger.warning("Sermon content is not structured JSON; using it as plain text")
    return SermonContent(content=raw)


def serialize_church_details(details: ChurchDetails) -> str:
    return json.dumps(details.model_dump(by_alias=True))


def serialize_sermon_content(content: SermonContent) -> str:
    return json.dumps(content.model_dump(by_alias=True))


def church_details_from_row(row: Dict[str, Any]) -> ChurchDetails:
    """Build ChurchDetails from a churches row in either storage layout."""
    location = row.get("location")
    if isinstance(location, dict):
        try:
            return ChurchDetails(
                description=row.get("description") or "",
                location=Location.model_validate(_drop_nulls(location)),
            )
        except ValidationError:
            logger.warning(f"Church {row.get('id')} has a malformed location column")
    return parse_church_details(row.get("description"))


def sermon_content_from_row(row: Dict[str, Any]) -> SermonContent:
    """Build SermonContent from a sermon_notes row in either storage layout."""
    meta = row.get("sermon_meta")
    if isinstance(meta, dict):
        try:
            parsed = SermonMeta.model_validate(_drop_nulls(meta))
            return SermonContent(
                pastor_name=parsed.pastor_name,
                church_name=parsed.church_name,
                content=row.get("content") or "",
                bible_verses=parsed.bible_verses,
            )
        except ValidationError:
            logger.warning(f"Sermon note {row.get('id')} has a malformed sermon_meta column")
    return parse_sermon_content(row.get("content"))


def church_columns(details: ChurchDetails, row: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Column values to write for a church.

    A row already in the split layout stays there; otherwise the configured
    layout applies. The legacy write nulls a stale location column.
    """
    row = row or {}
    if settings.structured_content_columns or row.get("location") is not None:
        return {
            "description": details.description,
            "location": details.location.model_dump(by_alias=True),
        }
    columns = {"description": serialize_church_details(details)}
    if "location" in row:
        columns["location"] = None
    return columns


def sermon_columns(content: SermonContent, row: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Column values to write for a sermon note, keeping an existing row's layout."""
    row = row or {}
    if settings.structured_content_columns or row.get("sermon_meta") is not None:
        meta = SermonMeta(
            pastor_name=content.pastor_name,
            church_name=content.church_name,
            bible_verses=content.bible_verses,
        )
        return {"content": content.content, "sermon_meta": meta.model_dump(by_alias=True)}
    columns = {"content": serialize_sermon_content(content)}
    if "sermon_meta" in row:
        columns["sermon_meta"] = None
    return columns


def location_subtitle(details: ChurchDetails) -> str:
    """Return "City, ST" when a city is known, otherwise the description text."""
    if details.location.city:
        return f"{details.location.city}, {details.location.state}"
    return details.description
