"""Attribute selections: the serializable (attribute id -> chosen values) sets
stored on cart line items and on a customer's checkout state.

Values are kept as strings. List-type attributes store value ids, text-type
attributes store what the customer typed. Gift-card fields ride along in the
same blob for gift-card products.
"""

import json
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class GiftCardInfo:
    recipient_name: str | None = None
    recipient_email: str | None = None
    sender_name: str | None = None
    sender_email: str | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data):
        if not data:
            return None
        return cls(**{k: data.get(k) for k in cls.__dataclass_fields__})


class AttributeSelection:
    """Selected attribute values of a product configuration."""

    def __init__(self, raw_attributes: str | None = None):
        self._attributes: dict[str, list[str]] = {}
        self._gift_card: GiftCardInfo | None = None

        raw = (raw_attributes or "").strip()
        if raw:
            self._load(raw)

    def _load(self, raw):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            raise ValueError(f"Invalid attribute selection: {raw!r}") from None

        if not isinstance(data, dict):
            raise ValueError(f"Attribute selection must be a JSON object: {raw!r}")

        for attribute_id, values in (data.get("attributes") or {}).items():
            self.add_attribute(attribute_id, values if isinstance(values, list) else [values])
        self._gift_card = GiftCardInfo.from_dict(data.get("gift_card"))

    @classmethod
    def from_map(cls, mapping, gift_card: GiftCardInfo | None = None):
        selection = cls()
        for attribute_id, values in (mapping or {}).items():
            selection.add_attribute(attribute_id, values)
        selection._gift_card = gift_card
        return selection

    # -------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------
    @property
    def attributes_map(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._attributes.items()}

    @property
    def attribute_ids(self) -> list[str]:
        return list(self._attributes)

    @property
    def has_attributes(self) -> bool:
        return len(self._attributes) > 0

    @property
    def gift_card(self) -> GiftCardInfo | None:
        return self._gift_card

    @gift_card.setter
    def gift_card(self, info: GiftCardInfo | None):
        self._gift_card = info

    def get_attribute_values(self, attribute_id) -> list[str] | None:
        values = self._attributes.get(str(attribute_id))
        return list(values) if values is not None else None

    # -------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------
    def add_attribute(self, attribute_id, values):
        bucket = self._attributes.setdefault(str(attribute_id), [])
        bucket.extend("" if v is None else str(v) for v in values)

    def add_attribute_value(self, attribute_id, value):
        if value is None:
            raise ValueError("value is required")
        self.add_attribute(attribute_id, [value])

    def remove_attributes(self, attribute_ids):
        for attribute_id in attribute_ids:
            self._attributes.pop(str(attribute_id), None)

    def copy(self):
        return type(self).from_map(self._attributes, self._gift_card)

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    def as_json(self) -> str | None:
        if not self._attributes and self._gift_card is None:
            return None

        data = {"attributes": self._attributes}
        if self._gift_card is not None:
            data["gift_card"] = asdict(self._gift_card)
        return json.dumps(data, sort_keys=True)

    def _normalized(self):
        return {k: sorted(v) for k, v in self._attributes.items() if v}

    def __eq__(self, other):
        if other is None:
            return not self._normalized()
        if not isinstance(other, AttributeSelection):
            return NotImplemented
        return self._normalized() == other._normalized()

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}({self._attributes!r})"


class CheckoutAttributeSelection(AttributeSelection):
    """Checkout attributes chosen by a customer (gift wrapping, delivery notes, ...)."""
