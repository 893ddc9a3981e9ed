"""Pydantic models for classification results, HTTP payloads and chat messages."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PartnerMatch(_CamelModel):
    """One partner whose order-ID format accepts the input."""

    key: str
    display_name: str
    description: str
    tracking_url: str
    note: Optional[str] = None


class ChainMatch(_CamelModel):
    """A blockchain transaction hash recognised in place of an order ID."""

    chain_key: str
    display_name: str
    description: str
    explorer_url: str
    raw_input: str


class ClassificationResult(_CamelModel):
    input: str
    is_chain_transaction: bool = False
    chain: Optional[ChainMatch] = None
    partners: Tuple[PartnerMatch, ...] = ()

    @computed_field  # type: ignore[misc]
    @property
    def count(self) -> int:
        return len(self.partners)


class LookupRequest(BaseModel):
    """Body of ``POST /api/lookup``; ``id`` is accepted as an alias."""

    model_config = ConfigDict(extra="ignore")

    order_id: Optional[str] = Field(default=None, alias="orderId")
    id: Optional[str] = None

    @field_validator("order_id", "id", mode="before")
    @classmethod
    def _numeric_ids_as_text(cls, value: Any) -> Any:
        # Banxa IDs are all digits and arrive as JSON numbers from some clients.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def identifier(self) -> str:
        return (self.order_id or self.id or "").strip()


class LookupResponse(_CamelModel):
    success: bool = True
    order_id: str
    is_chain_transaction: bool
    chain: Optional[ChainMatch] = None
    results: Tuple[PartnerMatch, ...] = ()
    count: int = 0

    @classmethod
    def from_result(cls, result: ClassificationResult) -> "LookupResponse":
        return cls(
            order_id=result.input,
            is_chain_transaction=result.is_chain_transaction,
            chain=result.chain,
            results=result.partners,
            count=result.count,
        )


class ErrorResponse(_CamelModel):
    success: bool = False
    error: str
    code: str


class ChatButton(_CamelModel):
    type: Literal["button"] = "button"
    text: str
    value: str
    style: str = "primary"


class ChatReply(_CamelModel):
    """Reply handed back to a chat channel."""

    type: Literal["text", "rich_message"] = "text"
    content: str
    buttons: List[ChatButton] = Field(default_factory=list)
    identifier: Optional[str] = None


class TwilioWebhookPayload(BaseModel):
    """Simplified view of Twilio WhatsApp webhook payload."""

    model_config = ConfigDict(extra="allow")

    from_number: str = Field(alias="From")
    to_number: Optional[str] = Field(default=None, alias="To")
    wa_id: Optional[str] = Field(default=None, alias="WaId")
    body: str = Field(default="", alias="Body")
    num_media: int = Field(default=0, alias="NumMedia")
    message_sid: Optional[str] = Field(default=None, alias="MessageSid")

    @field_validator("num_media", mode="before")
    @classmethod
    def _parse_num_media(cls, value: Any) -> int:
        if value in (None, ""):
            return 0
        try:
            return int(value)
        except (ValueError, TypeError):
            return 0
