"""Vision and text extractors on the OpenAI chat completions API."""

from __future__ import annotations

import base64
from logging import getLogger
from typing import TYPE_CHECKING, Any

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from presalewatch.domain.errors import ExtractionError
from presalewatch.domain.model import NOT_AVAILABLE, FieldValues

if TYPE_CHECKING:
    from presalewatch.config.openai import OpenAIConfig

log = getLogger(__name__)

VISION_PROMPT = """You analyse screenshots of crypto token presale websites.

Find the following values in the image and return them as a JSON object:

1. currentPrice - the current token price
2. nextPrice - the next stage token price (if shown)
3. listingPrice - the token price at listing (if shown)
4. raised - the total funds raised so far

Use "N/A" for any value you cannot find.

Example:
{
  "currentPrice": "$0.015",
  "nextPrice": "$0.020",
  "listingPrice": "$0.010",
  "raised": "$2,000,000"
}"""

NORMALIZE_PROMPT = """You analyse data about crypto token presales.

Extract the following values from the document below and return them as a JSON object
with the keys currentPrice, nextPrice, listingPrice and raised.

Formatting rules:
1. Prices keep their original numeric form (for example "0.0120919147161117" or "0.1819").
2. Amounts are plain numbers with two decimals (for example "10940083.36").
3. Use "N/A" for any value you cannot find.
4. For raised look at fields such as totalRaised, totalSold, raised, funds, collected.
5. For listingPrice look at fields such as listingPrice, launchPrice, finalPrice, icoPrice.
6. For currentPrice look at fields such as currentPrice, tokenPrice, price, current.
7. For nextPrice look at fields such as nextPrice, nextStagePrice, stagePrice, upcomingPrice.

Document:
"""

CONTEXT_SUFFIX = "\n\nUse the additional information above to read the values more accurately."


def _to_text(value: object) -> object:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class ExtractionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    current_price: str | None = Field(default=None, alias="currentPrice")
    next_price: str | None = Field(default=None, alias="nextPrice")
    listing_price: str | None = Field(default=None, alias="listingPrice")
    raised: str | None = None

    _stringify = field_validator(
        "current_price", "next_price", "listing_price", "raised", mode="before"
    )(_to_text)

    def to_values(self) -> FieldValues:
        return FieldValues(
            current_price=self.current_price or NOT_AVAILABLE,
            next_price=self.next_price or NOT_AVAILABLE,
            listing_price=self.listing_price or NOT_AVAILABLE,
            raised=self.raised or NOT_AVAILABLE,
        )


class OpenAIExtractor:
    """Implements both the vision and the text extractor ports."""

    def __init__(self, config: OpenAIConfig, *, client: AsyncOpenAI | None = None) -> None:
        self.config = config
        self._client = client or AsyncOpenAI(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.close()

    async def infer(self, image: bytes, auxiliary_text: str | None = None) -> FieldValues:
        encoded = base64.b64encode(image).decode("ascii")
        content: list[dict[str, Any]] = [
            {"type": "text", "text": _with_context(VISION_PROMPT, auxiliary_text)},
            {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{encoded}"}},
        ]
        payload = await self._complete(content)
        # both keys are mandatory in vision output
        if not payload.current_price or not payload.raised:
            raise ExtractionError("Vision output lacks currentPrice or raised")
        return payload.to_values()

    async def normalize(self, document: str, auxiliary_text: str | None = None) -> FieldValues:
        prompt = _with_context(NORMALIZE_PROMPT + document, auxiliary_text)
        payload = await self._complete(prompt)
        return payload.to_values()

    async def _complete(self, content: str | list[dict[str, Any]]) -> ExtractionPayload:
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": content}],  # type: ignore[list-item]
                max_tokens=self.config.max_tokens,
                temperature=0.1,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            raise ExtractionError(f"OpenAI request failed: {exc}") from exc

        raw = response.choices[0].message.content if response.choices else None
        if not raw or not raw.strip():
            raise ExtractionError("Empty response from OpenAI")
        log.debug("OpenAI raw output: %s", raw)
        try:
            return ExtractionPayload.model_validate_json(raw)
        except ValidationError as exc:
            raise ExtractionError(f"Malformed OpenAI output: {raw[:200]!r}") from exc


def _with_context(prompt: str, auxiliary_text: str | None) -> str:
    if not auxiliary_text:
        return prompt
    return f"{prompt}\n\n{auxiliary_text}{CONTEXT_SUFFIX}"
