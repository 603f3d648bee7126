"""
Module: payload

Purpose:
    Validated input payloads handed over by the application layer: a
    single item, or a group with its list of items. Parsing tolerates the
    loose shapes the dashboard sends (camelCase keys, numbers as strings,
    additional images as JSON text) and rejects what cannot be rendered.

Key Classes:
    - PriceTier: One named price tier of an item
    - ItemPayload: One product/service entry
    - GroupPayload: Price-list group header data
    - DetailPayload / ListPayload: What an export call renders

Key Functions:
    - ItemPayload.from_dict(data): Parse and validate
    - GroupPayload.from_dict(data): Parse and validate

Dependencies:
    - json (std)
    - core.errors: AssemblyError

Used By:
    - exporter.assembly.assembler
    - exporter.controller
    - cli
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

from sheet_toolkit.core.errors import AssemblyError

logger = logging.getLogger(__name__)


def _parse_amount(value: Any, field_name: str, *, required: bool) -> float:
    """Parse a non-negative money amount."""
    if value is None or value == "":
        if required:
            raise AssemblyError(f"Missing required field: {field_name}")
        return 0.0
    if isinstance(value, bool):
        raise AssemblyError(f"{field_name} must be a number: {value!r}")
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise AssemblyError(f"{field_name} must be a number: {value!r}") from e
    if amount != amount or amount < 0:  # NaN or negative
        raise AssemblyError(f"{field_name} must be non-negative: {value!r}")
    return amount


def _parse_image_list(value: Any) -> tuple[str, ...]:
    """Accept a list of URLs or a JSON-encoded list; anything else is empty."""
    if not value:
        return ()
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("additionalImages is not valid JSON, ignoring attachments")
            return ()
    if not isinstance(value, (list, tuple)):
        logger.warning(f"additionalImages has unexpected type {type(value).__name__}, ignoring")
        return ()
    return tuple(str(url) for url in value if url)


def _get(data: Mapping[str, Any], *keys: str) -> Any:
    """First present key among snake_case/camelCase spellings."""
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class PriceTier:
    """A named price tier; ``discount`` follows the item discount rule."""

    name: str
    price: float
    discount: float = 0.0
    description: str = ""

    @property
    def has_discount(self) -> bool:
        return 0 < self.discount < self.price

    @property
    def final_price(self) -> float:
        return self.discount if self.has_discount else self.price

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PriceTier":
        name = _get(data, "name", "label")
        if not name or not str(name).strip():
            raise AssemblyError("Price tier is missing a name")
        return cls(
            name=str(name).strip(),
            price=_parse_amount(data.get("price"), "prices[].price", required=True),
            discount=_parse_amount(data.get("discount"), "prices[].discount", required=False),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class ItemPayload:
    """
    One item to export (immutable).

    ``discount`` is the discounted selling price, active only when
    ``0 < discount < price``.

    Example:
        >>> item = ItemPayload(name="Sensor", price=100_000, discount=80_000)
        >>> item.has_discount, item.discount_percent
        (True, 20)
    """

    name: str
    price: float
    discount: float = 0.0
    quantity: Optional[str] = None
    description: str = ""
    short_description: str = ""
    image: Optional[str] = None
    additional_images: tuple[str, ...] = ()
    prices: tuple[PriceTier, ...] = ()

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise AssemblyError("Missing required field: name")
        if self.price < 0 or self.discount < 0:
            raise AssemblyError(f"Price fields must be non-negative for {self.name!r}")

    @property
    def has_discount(self) -> bool:
        return 0 < self.discount < self.price

    @property
    def final_price(self) -> float:
        return self.discount if self.has_discount else self.price

    @property
    def discount_percent(self) -> int:
        """Rounded discount percentage (0 when no discount is active)."""
        if not self.has_discount:
            return 0
        return round((1 - self.discount / self.price) * 100)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ItemPayload":
        """
        Parse an item dict as sent by the application.

        Raises:
            AssemblyError: If name/price are missing or numbers are invalid
        """
        if not isinstance(data, Mapping):
            raise AssemblyError(f"Item payload must be an object, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise AssemblyError("Missing required field: name")

        quantity = data.get("quantity")
        raw_tiers = data.get("prices") or ()
        if not isinstance(raw_tiers, (list, tuple)):
            raise AssemblyError(f"prices must be a list for {name!r}")

        return cls(
            name=name.strip(),
            price=_parse_amount(data.get("price"), "price", required=True),
            discount=_parse_amount(data.get("discount"), "discount", required=False),
            quantity=str(quantity).strip() if quantity not in (None, "") else None,
            description=str(data.get("description") or ""),
            short_description=str(_get(data, "short_description", "shortDescription") or ""),
            image=data.get("image") or None,
            additional_images=_parse_image_list(
                _get(data, "additional_images", "additionalImages")
            ),
            prices=tuple(PriceTier.from_dict(t) for t in raw_tiers),
        )


@dataclass(frozen=True)
class GroupPayload:
    """Price-list group metadata."""

    name: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupPayload":
        name = data.get("name") if isinstance(data, Mapping) else None
        if not isinstance(name, str) or not name.strip():
            raise AssemblyError("Missing required field: group.name")
        return cls(name=name.strip())


@dataclass(frozen=True)
class DetailPayload:
    """Single-item detail document."""

    item: ItemPayload


@dataclass(frozen=True)
class ListPayload:
    """
    Multi-item document.

    ``detailed`` selects the group-detail layout (every item rendered as
    a detail section) instead of the price-list table.
    """

    group: GroupPayload
    items: tuple[ItemPayload, ...] = field(default_factory=tuple)
    detailed: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, detailed: bool = False) -> "ListPayload":
        items: Sequence[Any] = data.get("items") or ()
        if not isinstance(items, (list, tuple)):
            raise AssemblyError("items must be a list")
        return cls(
            group=GroupPayload.from_dict(data.get("group") or {}),
            items=tuple(ItemPayload.from_dict(i) for i in items),
            detailed=detailed,
        )


ExportPayload = Union[DetailPayload, ListPayload]
