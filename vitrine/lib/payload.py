"""Normalization of admin write requests into catalog payloads.

Product writes arrive as multipart forms: a JSON document under ``payload``
(or ``data``) plus zero or more uploaded files. Category writes arrive as
plain JSON. Both are validated into pydantic models the catalog services
can persist without further checks.

Keys absent from a request are absent from ``model_fields_set``; updates
leave those columns untouched while creates treat them as empty.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, ClassVar, TypeVar
from uuid import UUID

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    model_validator,
)
from pydantic_core import PydanticCustomError

from vitrine.lib.exceptions import (
    CatalogError,
    InvalidPayload,
    MediaFileNotFound,
    MediaSourceRequired,
    MissingRequiredField,
)

# A payload is either already parsed or still a JSON document.
RawPayload = Mapping[str, Any] | str

PAYLOAD_FIELDS = ("payload", "data")
DEFAULT_URL_PREFIX = "/uploads"
_LIST_DELIMITERS = re.compile(r"[\n,]")


# -- scalar helpers --


def normalize_text(value: Any) -> str | None:
    """Trim a free-text value; blanks and non-strings become ``None``."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def normalize_list(value: Any) -> list[str]:
    """Normalize a list field to trimmed, non-empty strings in input order."""
    if not value:
        return []
    if isinstance(value, str):
        items = _LIST_DELIMITERS.split(value)
    elif isinstance(value, Sequence):
        items = [item if isinstance(item, str) else "" for item in value]
    else:
        return []
    return [item.strip() for item in items if item.strip()]


def normalize_media_src(src: str, url_prefix: str = DEFAULT_URL_PREFIX) -> str:
    """Make stored upload paths host-agnostic.

    With the default prefix ``https://cdn.example.com/uploads/a.png`` becomes
    ``/uploads/a.png``; paths outside the prefix are returned unchanged.
    """
    segment = "/" + url_prefix.strip("/") + "/"
    start = src.find(segment)
    if start == -1:
        return src
    return src[start:]


def required_text(value: Any) -> str:
    """Trim a required value; absent or blank input counts as missing."""
    if value is None:
        raise PydanticCustomError("missing", "Field required")
    text = value.strip() if isinstance(value, str) else str(value)
    if not text:
        raise PydanticCustomError("missing", "Field required")
    return text


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


def _clean_items(items: list[Any]) -> list[str]:
    return [text for text in map(normalize_text, items) if text]


def _index_or_none(value: Any) -> int | None:
    # Only real integers select an upload; anything else falls back to ``src``.
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


RequiredText = Annotated[str, BeforeValidator(required_text)]
OptionalText = Annotated[str | None, BeforeValidator(normalize_text)]
TextList = Annotated[list[str], BeforeValidator(normalize_list)]
StrictTextList = Annotated[list[Any], BeforeValidator(_none_as_empty), AfterValidator(_clean_items)]


class PayloadModel(BaseModel):
    """Base for request bodies; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    def provided(self, name: str) -> bool:
        """Whether the request carried ``name`` at all."""
        return name in self.model_fields_set


# -- parsing and error mapping --


def extract_raw_payload(body: Mapping[str, Any] | None) -> RawPayload | None:
    """Pick the payload out of a form body (``payload`` wins over ``data``)."""
    if not body:
        return None
    for key in PAYLOAD_FIELDS:
        value = body.get(key)
        if value:
            return value
    return None


def _location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def payload_error(exc: ValidationError) -> CatalogError:
    """Translate a pydantic validation failure into a catalog error."""
    errors = exc.errors()
    missing = [_location(err["loc"]) for err in errors if err["type"] == "missing" and len(err["loc"]) == 1]
    if missing:
        return MissingRequiredField(missing)

    first = errors[0]
    if first["type"] == "json_invalid":
        return InvalidPayload("Invalid payload: malformed JSON")
    if not first["loc"]:
        if first["type"] in ("model_type", "model_attributes_type", "dict_type"):
            return InvalidPayload("Invalid payload: expected a JSON object")
        return InvalidPayload(f"Invalid payload: {first['msg']}")
    return InvalidPayload(f"Invalid payload: {_location(first['loc'])}: {first['msg']}")


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], raw: Any, context: dict | None = None) -> ModelT:
    """Validate ``raw`` (a mapping or a JSON document) into ``model``."""
    try:
        if raw is None or raw == "":
            return model.model_validate({}, context=context)
        if isinstance(raw, (str, bytes)):
            return model.model_validate_json(raw, context=context)
        if isinstance(raw, Mapping):
            raw = dict(raw)
        return model.model_validate(raw, context=context)
    except ValidationError as exc:
        raise payload_error(exc) from exc


# -- media --


class MediaEntry(PayloadModel):
    """One declared media item: an upload by ``fileIndex`` or an existing ``src``."""

    file_index: Annotated[int | None, BeforeValidator(_index_or_none)] = Field(None, alias="fileIndex")
    src: OptionalText = None
    alt: OptionalText = None


class ResolvedMedia(BaseModel):
    """A media entry whose ``src`` is final and storage-relative."""

    model_config = ConfigDict(frozen=True)

    position: int
    src: str
    alt: str | None = None
    filename: str | None = None


def resolve_media(
    entries: Sequence[MediaEntry | Mapping[str, Any]],
    uploaded_files: Sequence[str],
    url_prefix: str = DEFAULT_URL_PREFIX,
) -> list[ResolvedMedia]:
    """Map declared media entries to uploaded files or existing paths.

    ``uploaded_files`` holds the stored filenames of the request's uploads in
    the order they were received. Array order is authoritative for
    ``position``; any position sent by the client is ignored.
    """
    resolved: list[ResolvedMedia] = []
    prefix = "/" + url_prefix.strip("/")

    for index, entry in enumerate(entries):
        if not isinstance(entry, MediaEntry):
            entry = validate_payload(MediaEntry, entry)

        if entry.file_index is not None:
            if entry.file_index < 0 or entry.file_index >= len(uploaded_files):
                raise MediaFileNotFound(entry.file_index)
            filename = uploaded_files[entry.file_index]
            resolved.append(
                ResolvedMedia(position=index, src=f"{prefix}/{filename}", alt=entry.alt, filename=filename)
            )
            continue

        if entry.src is None:
            raise MediaSourceRequired(index)

        resolved.append(
            ResolvedMedia(position=index, src=normalize_media_src(entry.src, prefix), alt=entry.alt)
        )

    return resolved


# -- product payload --


class AssetPayload(PayloadModel):
    type: RequiredText
    url: RequiredText
    title: OptionalText = None
    description: OptionalText = None


# keys that live under ``specs`` in the request document
SPEC_KEYS = (
    "designer",
    "dimensions",
    "lightSource",
    "leadTime",
    "warranty",
    "materials",
    "finishOptions",
    "customization",
)


class ProductPayload(PayloadModel):
    """Normalized product write.

    ``specs`` entries are lifted onto the model, so ``designer`` or
    ``materials`` read the same whether or not the client nested them.
    """

    SCALAR_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "slug",
        "category_id",
        "summary",
        "description",
        "designer",
        "dimensions",
        "light_source",
        "lead_time",
        "warranty",
    )

    name: RequiredText
    slug: RequiredText
    category_id: Annotated[UUID, BeforeValidator(required_text)] = Field(alias="categoryId")
    summary: OptionalText = None
    description: OptionalText = None
    designer: OptionalText = None
    dimensions: OptionalText = None
    light_source: OptionalText = Field(None, alias="lightSource")
    lead_time: OptionalText = Field(None, alias="leadTime")
    warranty: OptionalText = None
    materials: TextList = Field(default_factory=list)
    finish_options: TextList = Field(default_factory=list, alias="finishOptions")
    customizations: TextList = Field(default_factory=list, alias="customization")
    assets: Annotated[list[AssetPayload], BeforeValidator(_none_as_empty)] = Field(default_factory=list)
    media: Annotated[list[MediaEntry], BeforeValidator(_none_as_empty)] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_specs(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        data = {key: value for key, value in data.items() if key not in SPEC_KEYS}

        specs = data.pop("specs", None)
        if specs is not None and not isinstance(specs, dict):
            raise PydanticCustomError("specs_type", "specs must be an object")
        for key in SPEC_KEYS:
            if specs and key in specs:
                data[key] = specs[key]

        if info.context and not info.context.get("assets_enabled", True):
            data.pop("assets", None)
        return data

    def scalar_values(self) -> dict[str, Any]:
        """Scalar columns the request provided."""
        return {name: getattr(self, name) for name in self.SCALAR_FIELDS if self.provided(name)}

    def provided_list(self, name: str) -> list | None:
        """A collection's new items, or ``None`` when the request left it out."""
        return getattr(self, name) if self.provided(name) else None


def resolve_payload(raw: RawPayload | None, assets_enabled: bool = True) -> ProductPayload:
    """Validate and normalize a product create/update payload."""
    return validate_payload(ProductPayload, raw, context={"assets_enabled": assets_enabled})


# -- category payload --


class CategoryPayload(PayloadModel):
    """Category write where every field is optional, as for updates."""

    slug: RequiredText = None
    name: RequiredText = None
    headline: OptionalText = None
    description: OptionalText = None
    hero_image: OptionalText = Field(None, alias="heroImage")
    hero_alt: OptionalText = Field(None, alias="heroAlt")
    seo_title: OptionalText = Field(None, alias="seoTitle")
    seo_description: OptionalText = Field(None, alias="seoDescription")
    position: int = 0
    highlights: StrictTextList = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_seo(cls, data: Any) -> Any:
        # SEO may also arrive nested, the way categories are rendered.
        if isinstance(data, dict) and isinstance(data.get("seo"), dict):
            seo = data["seo"]
            data = {**data}
            data.setdefault("seoTitle", seo.get("title"))
            data.setdefault("seoDescription", seo.get("description"))
        return data

    def scalar_values(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name != "highlights" and self.provided(name)
        }


class NewCategoryPayload(CategoryPayload):
    slug: RequiredText
    name: RequiredText


def resolve_category_payload(raw: RawPayload | None, partial: bool = False) -> CategoryPayload:
    """Validate a category write; ``partial`` relaxes required fields for updates."""
    return validate_payload(CategoryPayload if partial else NewCategoryPayload, raw)
