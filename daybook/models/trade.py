"""Trade record data models.

A daily bucket holds a mix of trade entries and standalone attachments
(voice notes, chart screenshots). The ``type`` field tags each record;
buckets written before the tag existed omit it on trades.
"""

import uuid
from datetime import date as date_type
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _new_id() -> str:
    return str(uuid.uuid4())


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _Record(BaseModel):
    """Common configuration for persisted records."""

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class Emotions(_Record):
    """Trader's emotional state before, during and after a trade."""

    pre: Optional[str] = Field(default=None, description="Emotion before entry")
    during: Optional[str] = Field(default=None, description="Emotion while in the trade")
    post: Optional[str] = Field(default=None, description="Emotion after exit")

    @field_validator("pre", "during", "post", mode="before")
    @classmethod
    def _blank_emotion(cls, value: Any) -> Any:
        return _blank_to_none(value)


class TradeEntry(_Record):
    """Represents one logged trade."""

    type: Literal["trade"] = Field(default="trade", description="Record kind")
    id: str = Field(default_factory=_new_id, description="Unique record ID")
    symbol: str = Field(..., min_length=1, description="Instrument symbol")
    side: Literal["long", "short"] = Field(..., description="Trade direction")
    entry_price: Optional[float] = Field(default=None, description="Entry price")
    exit_price: Optional[float] = Field(default=None, description="Exit price")
    quantity: Optional[float] = Field(default=None, description="Contracts or lots")
    pnl: float = Field(default=0.0, description="Realized P&L")
    rr: Optional[str] = Field(default=None, description="Reward:risk, free text")
    notes: Optional[str] = Field(default=None, description="Setup and context notes")
    emotions: Emotions = Field(default_factory=Emotions)
    voice_note_ref: Optional[str] = Field(default=None, description="Voice memo reference")
    screenshot_refs: list[str] = Field(default_factory=list, description="Chart screenshots")
    timezone: Optional[str] = Field(default=None, description="Timezone at entry")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation time")

    @field_validator(
        "entry_price", "exit_price", "quantity", "rr", "notes", mode="before"
    )
    @classmethod
    def _blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("symbol", mode="before")
    @classmethod
    def _upper_symbol(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("pnl", mode="before")
    @classmethod
    def _default_pnl(cls, value: Any) -> Any:
        # Stored P&L may be missing or blank; treat as flat.
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0.0
        return value


class VoiceNote(_Record):
    """A standalone voice memo attached to a day."""

    type: Literal["voice"] = "voice"
    id: str = Field(default_factory=_new_id)
    ref: str = Field(..., validation_alias=AliasChoices("ref", "url"))
    date: Optional[date_type] = None
    created_at: datetime = Field(default_factory=datetime.now)


class Screenshot(_Record):
    """A standalone chart screenshot attached to a day."""

    type: Literal["screenshot"] = "screenshot"
    id: str = Field(default_factory=_new_id)
    ref: str = Field(..., validation_alias=AliasChoices("ref", "url"))
    name: Optional[str] = None
    date: Optional[date_type] = None
    created_at: datetime = Field(default_factory=datetime.now)


def _record_kind(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("type") or "trade"
    return getattr(value, "type", "trade")


TradeRecord = Annotated[
    Union[
        Annotated[TradeEntry, Tag("trade")],
        Annotated[VoiceNote, Tag("voice")],
        Annotated[Screenshot, Tag("screenshot")],
    ],
    Discriminator(_record_kind),
]

_bucket_adapter = TypeAdapter(list[TradeRecord])


def parse_records(raw: Union[str, bytes]) -> list:
    """Parse a serialized daily bucket.

    Args:
        raw: JSON array of records.

    Returns:
        List of TradeEntry, VoiceNote and Screenshot records.

    Raises:
        pydantic.ValidationError: If the payload is not a valid bucket.
    """
    return _bucket_adapter.validate_json(raw)


def dump_records(records: list) -> str:
    """Serialize records to the persisted JSON layout."""
    return _bucket_adapter.dump_json(records, by_alias=True).decode("utf-8")
