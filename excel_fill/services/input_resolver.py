"""
Input resolution for fill requests.

Transport layers hand the core a mapping from part name to either raw bytes
(file parts) or decoded text (plain form fields). This module picks the
template and the payload out of that mapping and parses the payload JSON.

Accepted field names are kept as ordered tuples of lookup strategies; the
first strategy that finds a part wins. Accepting a new field name means
appending a strategy, not adding a branch.
"""

import json
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from excel_fill.exceptions.fill_exceptions import (
    InvalidPayloadJsonError,
    MissingPayloadError,
    MissingTemplateError,
)

Part = bytes | str | None
PartKind = Literal["binary", "text"]


@dataclass(frozen=True)
class PartLookup:
    """
    One named lookup strategy.

    Attributes:
        name: Part name to look for.
        kind: ``"binary"`` matches file parts, ``"text"`` matches form fields.
    """

    name: str
    kind: PartKind

    def find(self, parts: Mapping[str, Part]) -> Part:
        """Return the matching part, or None if this strategy does not apply."""
        value = parts.get(self.name)
        if self.kind == "binary" and isinstance(value, (bytes, bytearray)):
            return bytes(value)
        # An empty text field counts as absent.
        if self.kind == "text" and isinstance(value, str) and value:
            return value
        return None


TEMPLATE_LOOKUPS: tuple[PartLookup, ...] = (
    PartLookup("template", "binary"),
    PartLookup("file", "binary"),
)

PAYLOAD_LOOKUPS: tuple[PartLookup, ...] = (
    PartLookup("payload", "text"),
    PartLookup("payload", "binary"),
)


@dataclass(frozen=True)
class ResolvedInputs:
    """
    Template and payload picked out of the request parts.

    Attributes:
        template_bytes: Raw template document.
        payload_text: Payload JSON text.
        template_field: Name of the part the template came from.
        payload_kind: Whether the payload came from a text field or a file.
    """

    template_bytes: bytes
    payload_text: str
    template_field: str
    payload_kind: PartKind


def resolve_template(parts: Mapping[str, Part]) -> tuple[str, bytes]:
    """
    Pick the template out of the request parts.

    The first present part wins, even if it turns out to be empty.

    Args:
        parts: Mapping from part name to bytes or text.

    Returns:
        Tuple of (field name, template bytes).

    Raises:
        MissingTemplateError: If no template part is present, or the chosen
            part has no bytes.
    """
    accepted = [lookup.name for lookup in TEMPLATE_LOOKUPS]
    received = sorted(parts)

    for lookup in TEMPLATE_LOOKUPS:
        value = lookup.find(parts)
        if value is None:
            continue
        if not value:
            raise MissingTemplateError(
                accepted_fields=accepted,
                received_fields=received,
                reason=f"Field '{lookup.name}' is empty",
            )
        return lookup.name, value

    raise MissingTemplateError(accepted_fields=accepted, received_fields=received)


def resolve_payload(parts: Mapping[str, Part]) -> tuple[PartKind, str]:
    """
    Pick the payload text out of the request parts.

    A text field is preferred; a file part is decoded as UTF-8.

    Args:
        parts: Mapping from part name to bytes or text.

    Returns:
        Tuple of (part kind, payload text).

    Raises:
        MissingPayloadError: If no payload part is present.
        InvalidPayloadJsonError: If a payload file is not valid UTF-8.
    """
    for lookup in PAYLOAD_LOOKUPS:
        value = lookup.find(parts)
        if value is None:
            continue
        if isinstance(value, str):
            return lookup.kind, value
        if not value:
            continue
        try:
            # utf-8-sig drops a leading BOM written by some editors.
            return lookup.kind, value.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InvalidPayloadJsonError(
                reason=f"Payload file is not UTF-8: {e}",
                raw_text=value[: InvalidPayloadJsonError.EXCERPT_LENGTH].decode("utf-8", "replace"),
            ) from e

    raise MissingPayloadError(received_fields=sorted(parts))


def resolve_inputs(parts: Mapping[str, Part]) -> ResolvedInputs:
    """
    Resolve the template and the payload text from the request parts.

    The template is resolved first, so a missing template is reported
    before the payload is looked at.

    Args:
        parts: Mapping from part name to bytes (file parts) or str (fields).

    Returns:
        ResolvedInputs with the template bytes and payload text.

    Raises:
        MissingTemplateError: If no usable template part was supplied.
        MissingPayloadError: If no payload was supplied.
        InvalidPayloadJsonError: If a payload file is not valid UTF-8.
    """
    template_field, template_bytes = resolve_template(parts)
    payload_kind, payload_text = resolve_payload(parts)

    return ResolvedInputs(
        template_bytes=template_bytes,
        payload_text=payload_text,
        template_field=template_field,
        payload_kind=payload_kind,
    )


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by the json module but are not JSON.
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_payload(text: str) -> dict[str, Any]:
    """
    Parse payload text into a JSON object.

    Args:
        text: Raw payload text.

    Returns:
        The decoded JSON object.

    Raises:
        InvalidPayloadJsonError: If the text is not JSON, or the JSON value
            is not an object.
    """
    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise InvalidPayloadJsonError(reason=str(e), raw_text=text) from e

    if not isinstance(payload, dict):
        raise InvalidPayloadJsonError(
            reason=f"Expected a JSON object, got {type(payload).__name__}",
            raw_text=text,
        )

    return payload
