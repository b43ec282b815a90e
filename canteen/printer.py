"""Thermal-printer output for order bills."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from canteen.config import (
    CURRENCY_SYMBOL,
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from canteen.models import Order

logger = logging.getLogger(__name__)

_SEPARATOR_TOKEN = "__SEP__"
_SEPARATOR_HEIGHT_PX = 14
_SEPARATOR_THICKNESS_PX = 3
# Extra vertical headroom so descenders are not clipped on thermal output.
_LINE_EXTRA_PX = 12
_FONT_OVERRIDE_ENV = "CANTEEN_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)


def money(amount: float) -> str:
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def bill_lines(order: Order) -> list[str]:
    """Lay out a bill as plain text lines, separators marked by a token."""
    lines = [f"Bill {order.order_id}", order.placed_at.strftime("%Y-%m-%d %H:%M"), _SEPARATOR_TOKEN]
    for line in order.lines:
        lines.append(f"{line.quantity} x {line.item_name} ({line.portion.name})")
        lines.append(f"    {money(line.line_total)}")
    if order.instructions:
        lines.append(f"Note: {order.instructions}")
    lines.extend(
        [
            _SEPARATOR_TOKEN,
            f"Subtotal {money(order.subtotal)}",
            f"Tax {money(order.tax)}",
            f"Total {money(order.total)}",
            order.status.value.upper(),
        ]
    )
    return lines


def _font_candidates() -> list[str]:
    override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    ordered = [override, PRINTER_FONT_PATH, *_LINUX_FONT_FALLBACKS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    """First existing font file from the env override, the configured path, then Linux fallbacks."""
    candidates = _font_candidates()
    for candidate in candidates:
        if Path(candidate).is_file():
            return candidate
    raise RuntimeError(
        f"No bill font found. Set {_FONT_OVERRIDE_ENV} to a .ttf/.otf file. Tried: {', '.join(candidates)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """
    Report whether bills can be printed.

    Besides the printer driver and a font, the font must carry a glyph for
    the currency symbol, otherwise every amount on the bill prints as a box.
    """
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    if not font.getmask(CURRENCY_SYMBOL).getbbox():
        return (False, f"Printer font has no glyph for {CURRENCY_SYMBOL}")
    return (True, "Printer ready")


def split_portion_suffix(text: str) -> tuple[str, str]:
    """Split ``"2 x Chicken Biryani (Half)"`` into the item part and ``" (Half)"``."""
    if text.endswith(")") and " (" in text:
        head, _, portion = text.rpartition(" (")
        return head, f" ({portion}"
    return text, ""


def _fit_text_to_px(text: str, font: object, max_width_px: int) -> str:
    """Shorten a bill line to fit, trimming the item name before the portion label."""
    from PIL import Image, ImageDraw

    draw = ImageDraw.Draw(Image.new("1", (1, 1), color=1))

    def width(candidate: str) -> int:
        return draw.textbbox((0, 0), candidate, font=font)[2]

    if width(text) <= max_width_px:
        return text
    head, suffix = split_portion_suffix(text)
    if width(f"...{suffix}") > max_width_px:
        head, suffix = text, ""
    while head:
        head = head[:-1]
        candidate = f"{head.rstrip()}...{suffix}"
        if width(candidate) <= max_width_px:
            return candidate
    return "..."


def render_line(text: str, font: object) -> object:
    from PIL import Image, ImageDraw

    canvas_height = PRINTER_FONT_SIZE + _LINE_EXTRA_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)

    fitted = _fit_text_to_px(text, font, PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX * 2)
    bbox = draw.textbbox((0, 0), fitted, font=font)
    text_height = bbox[3] - bbox[1]
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((PRINTER_LEFT_INDENT_PX, y), fitted, font=font, fill=0)
    return img


def render_separator() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _SEPARATOR_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = (_SEPARATOR_HEIGHT_PX - _SEPARATOR_THICKNESS_PX) // 2
    draw.rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _SEPARATOR_THICKNESS_PX - 1), fill=0)
    return img


def render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def print_order_bill(order: Order) -> None:
    """Print the bill for one order and cut the ticket."""
    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)

    for text in bill_lines(order):
        if text == _SEPARATOR_TOKEN:
            printer.image(render_separator())
        else:
            printer.image(render_line(text, font))
    printer.image(render_spacer(PRINTER_TAIL_SPACER_PX))
    printer.cut()
    logger.debug("bill_printed order_id=%s", order.order_id)
