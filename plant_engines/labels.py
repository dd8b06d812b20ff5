"""
Module: plant_engines.labels
Responsibility:
    Turn a label template (percent-positioned elements on a fixed-size label)
    plus a lot's field values into printable HTML.  Barcode elements become
    containers that carry value, symbology and width for the client-side
    barcode renderer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The print date is passed
    in by the caller.

Invariants enforced:
    - Label size in pixels = inches x DPI (96).
    - Element left/top/width are percentages of the label width/height.
    - Barcode value falls back to "123456789", symbology to CODE128, and the
      container never extends past 10px short of the right edge.
    - Copies are clamped to 1..100.
"""

from __future__ import annotations

import html
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from plant_engines.tracer import traced_engine

DEFAULT_DPI = 96
DEFAULT_FONT_SIZE = 12
DEFAULT_BARCODE_VALUE = "123456789"
DEFAULT_BARCODE_FORMAT = "CODE128"
MIN_COPIES = 1
MAX_COPIES = 100

DATE_FORMAT = "%m/%d/%Y"


class LotType(str, Enum):
    RECEIVING = "receiving"
    PRODUCTION = "production"


class ElementType(str, Enum):
    TEXT = "text"
    FIELD = "field"
    DATE = "date"
    BARCODE = "barcode"
    IMAGE = "image"


RECEIVING_FIELD_KEYS: tuple[str, ...] = (
    "lot_number",
    "internal_lot_number",
    "material_name",
    "material_code",
    "supplier_name",
    "quantity",
    "unit",
    "expiry_date",
    "received_date",
    "location",
    "allergens",
)

PRODUCTION_FIELD_KEYS: tuple[str, ...] = (
    "lot_number",
    "product_name",
    "product_sku",
    "quantity",
    "expiry_date",
    "production_date",
)


@dataclass(frozen=True)
class LabelElement:
    """One positioned element; geometry is in percent of the label."""

    type: ElementType
    x: float = 0
    y: float = 0
    width: float = 100
    height: float = 10
    content: str = ""
    font_size: int | None = None
    font_weight: str | None = None
    text_align: str | None = None
    barcode_type: str | None = None
    field_key: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LabelElement:
        return cls(
            type=ElementType(data["type"]),
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 100)),
            height=float(data.get("height", 10)),
            content=data.get("content") or "",
            font_size=data.get("fontSize"),
            font_weight=data.get("fontWeight"),
            text_align=data.get("textAlign"),
            barcode_type=data.get("barcodeType"),
            field_key=data.get("fieldKey"),
        )


@dataclass(frozen=True)
class LabelLayout:
    width_inches: float
    height_inches: float
    elements: tuple[LabelElement, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(
        cls,
        width_inches: float | Decimal,
        height_inches: float | Decimal,
        fields_config: Sequence[Mapping[str, Any]] | None,
    ) -> LabelLayout:
        return cls(
            width_inches=float(width_inches),
            height_inches=float(height_inches),
            elements=tuple(LabelElement.from_dict(e) for e in fields_config or ()),
        )


# ---------------------------------------------------------------------------
# Field values
# ---------------------------------------------------------------------------


def format_label_date(value: date | None) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def format_quantity(value: Decimal | None) -> str:
    if not value:
        return ""
    return format(value.normalize(), "f")


def format_allergens(allergens: Sequence[str] | None) -> str:
    if not allergens:
        return ""
    return f"Contains: {', '.join(allergens)}"


@dataclass(frozen=True)
class ReceivingLotLabelData:
    internal_lot_number: str | None = None
    material_name: str | None = None
    material_code: str | None = None
    allergens: tuple[str, ...] = ()
    supplier_name: str | None = None
    quantity_received: Decimal | None = None
    unit_code: str | None = None
    expiry_date: date | None = None
    received_date: date | None = None
    location_name: str | None = None

    def field_values(self) -> dict[str, str]:
        lot_number = self.internal_lot_number or ""
        return {
            "lot_number": lot_number,
            "internal_lot_number": lot_number,
            "material_name": self.material_name or "",
            "material_code": self.material_code or "",
            "supplier_name": self.supplier_name or "",
            "quantity": format_quantity(self.quantity_received),
            "unit": self.unit_code or "",
            "expiry_date": format_label_date(self.expiry_date),
            "received_date": format_label_date(self.received_date),
            "location": self.location_name or "",
            "allergens": format_allergens(self.allergens),
        }


@dataclass(frozen=True)
class ProductionLotLabelData:
    lot_number: str | None = None
    product_name: str | None = None
    product_sku: str | None = None
    quantity_produced: Decimal | None = None
    expiry_date: date | None = None
    production_date: date | None = None

    def field_values(self) -> dict[str, str]:
        return {
            "lot_number": self.lot_number or "",
            "product_name": self.product_name or "",
            "product_sku": self.product_sku or "",
            "quantity": format_quantity(self.quantity_produced),
            "expiry_date": format_label_date(self.expiry_date),
            "production_date": format_label_date(self.production_date),
        }


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _px(value: float) -> str:
    return f"{round(value, 2):g}"


def barcode_module_width(container_width: float, value: str) -> int:
    """Bar width (1 or 2) that fits ``value`` into the container."""
    if not value:
        return 1
    return max(1, min(2, int(container_width // (len(value) * 11))))


def clamp_copies(copies: int) -> int:
    return max(MIN_COPIES, min(MAX_COPIES, int(copies)))


def _text_div(left: float, top: float, width: float, el: LabelElement, body: str) -> str:
    return (
        f'<div style="position: absolute; left: {_px(left)}px; top: {_px(top)}px; '
        f'width: {_px(width)}px; font-size: {el.font_size or DEFAULT_FONT_SIZE}px; '
        f'font-weight: {el.font_weight or "normal"}; '
        f'text-align: {el.text_align or "left"};">{html.escape(body)}</div>'
    )


def render_label_html(
    layout: LabelLayout,
    fields: Mapping[str, str],
    print_date: date,
    dpi: int = DEFAULT_DPI,
    barcode_format: str = DEFAULT_BARCODE_FORMAT,
) -> str:
    """HTML for a single label."""
    width_px = layout.width_inches * dpi
    height_px = layout.height_inches * dpi

    parts: list[str] = []
    for el in layout.elements:
        left = el.x / 100 * width_px
        top = el.y / 100 * height_px
        width = el.width / 100 * width_px

        if el.type is ElementType.TEXT:
            parts.append(_text_div(left, top, width, el, el.content))
        elif el.type is ElementType.FIELD:
            parts.append(_text_div(left, top, width, el, fields.get(el.field_key or "", "")))
        elif el.type is ElementType.DATE:
            parts.append(
                f'<div style="position: absolute; left: {_px(left)}px; top: {_px(top)}px; '
                f'width: {_px(width)}px; font-size: {el.font_size or DEFAULT_FONT_SIZE}px;">'
                f"{format_label_date(print_date)}</div>"
            )
        elif el.type is ElementType.BARCODE:
            value = fields.get(el.field_key or "lot_number", "") or DEFAULT_BARCODE_VALUE
            barcode_width = min(width, width_px - left - 10)
            parts.append(
                f'<div style="position: absolute; left: {_px(left)}px; top: {_px(top)}px; '
                f'width: {_px(barcode_width)}px; overflow: hidden;" class="barcode-container" '
                f'data-value="{html.escape(value)}" '
                f'data-format="{html.escape(el.barcode_type or barcode_format)}" '
                f'data-width="{_px(barcode_width)}" '
                f'data-module-width="{barcode_module_width(barcode_width, value)}"></div>'
            )

    return (
        f'<div class="label" style="position: relative; width: {_px(width_px)}px; '
        f'height: {_px(height_px)}px; border: 1px solid #ccc; background: white; '
        f'font-family: Arial, sans-serif; margin: 10px;">'
        + "".join(parts)
        + "</div>"
    )


@traced_engine("labels", "1.0", fingerprint_fields=("copies",))
def render_print_document(
    layout: LabelLayout,
    fields: Mapping[str, str],
    print_date: date,
    copies: int = 1,
    dpi: int = DEFAULT_DPI,
    barcode_format: str = DEFAULT_BARCODE_FORMAT,
) -> str:
    """Full HTML page with ``copies`` labels, one per printed page."""
    label = render_label_html(layout, fields, print_date, dpi, barcode_format)
    body = label * clamp_copies(copies)
    return (
        "<!DOCTYPE html><html><head><title>Print Labels</title><style>"
        "@media print { body { margin: 0; padding: 0; } "
        ".label { page-break-after: always; } "
        ".label:last-child { page-break-after: auto; } } "
        "body { font-family: Arial, sans-serif; }"
        f"</style></head><body>{body}</body></html>"
    )
