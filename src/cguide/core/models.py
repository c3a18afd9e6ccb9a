"""Guidelines document model: the versioned aggregate consumed by packets and lint"""

from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator


SCHEMA_VERSION = 1


class PrimaryGoal(str, Enum):
    subscribe = "subscribe"
    sell = "sell"
    inform = "inform"
    community = "community"
    other = "other"


class PointOfView(str, Enum):
    we_you = "we_you"
    i_you = "i_you"
    third_person = "third_person"


class Readability(str, Enum):
    simple = "simple"
    general = "general"
    expert = "expert"


class TextPolicy(str, Enum):
    never = "never"
    only_if_requested = "only_if_requested"
    ok = "ok"


class FormattingTag(str, Enum):
    h2s = "h2s"
    bullets = "bullets"
    short_paragraphs = "short_paragraphs"
    single_cta = "single_cta"


def _choice(enum_cls: type[Enum], optional: bool = True) -> BeforeValidator:
    """Coerce known values to enum_cls, "" to None (optional fields), and keep unknown values verbatim."""
    def coerce(value: Any) -> Any:
        if optional and (value is None or value == ""):
            return None
        try:
            return enum_cls(value)
        except ValueError:
            return value
    return BeforeValidator(coerce)


GoalChoice = Annotated[Optional[Union[PrimaryGoal, str]], _choice(PrimaryGoal)]
PovChoice = Annotated[Optional[Union[PointOfView, str]], _choice(PointOfView)]
ReadabilityChoice = Annotated[Optional[Union[Readability, str]], _choice(Readability)]
TextPolicyChoice = Annotated[Optional[Union[TextPolicy, str]], _choice(TextPolicy)]
FormattingChoice = Annotated[Union[FormattingTag, str], _choice(FormattingTag, optional=False)]
OptionalText = Annotated[Optional[str], BeforeValidator(lambda v: None if v == "" else v)]
OptionalInt = Annotated[Optional[int], BeforeValidator(lambda v: None if v == "" else v)]


def has_value(value: Any) -> bool:
    """True when value carries content: non-empty str/list/dict, a non-empty section, any number."""
    if value is None:
        return False
    if isinstance(value, _Section):
        return not value.is_empty()
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


class _Section(BaseModel):
    """Base for document sections; immutable, unknown keys ignored."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _empty_list_as_mapping(cls, data):
        # stored JSON may encode an empty object as []
        if isinstance(data, list) and not data:
            return {}
        return data

    def is_empty(self) -> bool:
        return not any(has_value(v) for v in self.__dict__.values())


class TermNote(_Section):
    """A vocabulary entry: a term plus an optional usage note."""
    term: str = ""
    note: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_plain_string(cls, data):
        if isinstance(data, str):
            return {"term": data}
        return data


class BrandContext(_Section):
    site_description: str = ""
    audience:         str = ""
    primary_goal:     GoalChoice = None
    topics:           list[str] = Field(default_factory=list)


class VoiceTone(_Section):
    description: str = ""
    tone_traits: list[str] = Field(default_factory=list)
    tone_notes:  str = ""
    pov:         PovChoice = None
    readability: ReadabilityChoice = None


class CopyRules(_Section):
    dos:        list[str] = Field(default_factory=list)
    donts:      list[str] = Field(default_factory=list)
    formatting: list[FormattingChoice] = Field(default_factory=list)


class Vocabulary(_Section):
    prefer:            list[TermNote] = Field(default_factory=list)
    avoid:             list[TermNote] = Field(default_factory=list)
    acronyms:          list[TermNote] = Field(default_factory=list)
    acronym_usage:     str = ""
    custom_dictionary: list[str] = Field(default_factory=list)
    voice_corrections: list[TermNote] = Field(default_factory=list)


class Heuristics(_Section):
    """Numeric writing targets; every field is nullable."""
    words_per_sentence:      OptionalInt = None
    sentences_per_paragraph: OptionalInt = None
    paragraphs_per_section:  OptionalInt = None
    reading_level:           OptionalText = None
    reading_level_custom:    OptionalText = None
    max_syllables:           OptionalInt = None


class Reference(_Section):
    type:  str = ""
    title: str = ""
    url:   str = ""
    notes: str = ""


class References(_Section):
    references: list[Reference] = Field(default_factory=list)
    notes:      str = ""


class ReferenceImage(_Section):
    id:    OptionalInt = None
    url:   str = ""
    alt:   str = ""
    notes: str = ""


class ImageStyle(_Section):
    dos:              list[str] = Field(default_factory=list)
    donts:            list[str] = Field(default_factory=list)
    text_policy:      TextPolicyChoice = None
    reference_images: list[ReferenceImage] = Field(default_factory=list)


class BlockCopyRules(_Section):
    dos:   list[str] = Field(default_factory=list)
    donts: list[str] = Field(default_factory=list)


class BlockGuidelines(_Section):
    """Per-block overrides layered on top of the site-level copy rules."""
    copy_rules: BlockCopyRules = Field(default_factory=BlockCopyRules)
    notes:      str = ""


class Guidelines(_Section):
    """The full guidelines document. Every field is optional; Guidelines() is the default document."""
    version:       int = SCHEMA_VERSION
    brand_context: BrandContext = Field(default_factory=BrandContext)
    voice_tone:    VoiceTone = Field(default_factory=VoiceTone)
    copy_rules:    CopyRules = Field(default_factory=CopyRules)
    vocabulary:    Vocabulary = Field(default_factory=Vocabulary)
    heuristics:    Heuristics = Field(default_factory=Heuristics)
    references:    References = Field(default_factory=References)
    images:        ImageStyle = Field(default_factory=ImageStyle)
    notes:         str = ""
    blocks:        dict[str, BlockGuidelines] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _legacy_image_style(cls, data):
        """Accept the legacy `image_style` key when `images` is absent or empty."""
        if isinstance(data, dict) and "image_style" in data:
            data = dict(data)
            legacy = data.pop("image_style")
            if not data.get("images"):
                data["images"] = legacy
        return data

    @field_validator("blocks", mode="before")
    @classmethod
    def _empty_blocks(cls, blocks):
        if isinstance(blocks, list) and not blocks:
            return {}
        return blocks

    @field_validator("blocks")
    @classmethod
    def _namespaced_block_keys(cls, blocks: dict[str, BlockGuidelines]) -> dict[str, BlockGuidelines]:
        for key in blocks:
            namespace, _, name = key.partition("/")
            if not namespace or not name:
                raise ValueError(f"Block key must be 'namespace/name', got {key!r}")
        return blocks

    def is_empty(self) -> bool:
        # version is a schema tag, not content
        return not any(has_value(v) for k, v in self.__dict__.items() if k != "version")

    def section(self, name: str) -> Any:
        """Return the top-level section called name, or None if the document has no such section."""
        return getattr(self, name, None) if name in type(self).model_fields else None

    def block(self, block_name: str) -> Optional[BlockGuidelines]:
        return self.blocks.get(block_name)


def default_document() -> Guidelines:
    """Return an empty document with every field defaulted."""
    return Guidelines()


def coalesce(document: Optional[Guidelines]) -> Guidelines:
    """Substitute the default document for None."""
    return document if document is not None else default_document()
