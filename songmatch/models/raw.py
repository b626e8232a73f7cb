"""Loosely-typed models of the remote profile payload.

The remote catalog API is undocumented and its records are inconsistent:
fields go missing, come back ``null``, as empty strings or with the wrong
type.  Everything the remote sends is modelled here as optional, and
:func:`entry_from_raw` is the single boundary where a raw clip becomes a
validated :class:`~songmatch.models.catalog.CatalogEntry`.  Nothing outside
this module touches raw dictionaries.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from songmatch.models.catalog import CatalogEntry
from songmatch.utils.logging import get_logger

_logger = get_logger(__name__)

_CLIPS_FIELD = "clips"


class RawClipMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt: str | None = None
    gpt_description_prompt: str | None = None
    tags: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Any:
        # Wrong-typed fields are treated as missing and defaulted downstream.
        return value if isinstance(value, str) else None


class RawClip(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str | None = None
    audio_url: str | None = None
    image_url: str | None = None
    image_large_url: str | None = None
    metadata: RawClipMetadata | None = None

    @field_validator("id", "title", "audio_url", "image_url", "image_large_url", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @field_validator("metadata", mode="before")
    @classmethod
    def _object_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


def extract_clips(payload: Any) -> list[Any] | None:
    """Return the raw clip list from a decoded page body.

    Returns ``None`` when the body is not an object or lacks the clips
    field (the page is absent).  A clips field that is not a list counts
    as a present but empty page.
    """
    if not isinstance(payload, dict) or _CLIPS_FIELD not in payload:
        return None

    clips = payload[_CLIPS_FIELD]
    if not isinstance(clips, list):
        return []
    return clips


def entry_from_raw(raw: Any) -> CatalogEntry | None:
    """Convert one raw clip into a :class:`CatalogEntry`.

    Parameters
    ----------
    raw:
        A single element of the remote clips array.

    Returns
    -------
    CatalogEntry or None
        ``None`` when the clip is not an object, fails validation, or has no
        usable identifier.
    """
    if not isinstance(raw, dict):
        return None

    try:
        clip = RawClip.model_validate(raw)
    except ValidationError as exc:
        _logger.debug("raw_clip_invalid", error_count=exc.error_count())
        return None

    if not clip.id:
        return None

    metadata = clip.metadata or RawClipMetadata()
    return CatalogEntry(
        id=clip.id,
        title=clip.title or "Untitled",
        lyrics=metadata.prompt or metadata.gpt_description_prompt or "",
        audio_url=clip.audio_url or None,
        image_url=clip.image_large_url or clip.image_url or None,
        tags=metadata.tags or "",
    )
