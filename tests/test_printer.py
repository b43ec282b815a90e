from __future__ import annotations

from datetime import datetime, timezone

import pytest

from canteen import printer
from canteen.models import CartLine, Order, OrderStatus


@pytest.fixture
def order(biryani, chai):
    lines = (
        CartLine("B", "Chicken Biryani", biryani.portion("Half"), 2),
        CartLine("C", "Masala Chai", chai.portions[0], 1),
    )
    return Order(
        order_id="ORDAB12CD34",
        account_id="alice",
        lines=lines,
        subtotal=480.0,
        tax=24.0,
        total=504.0,
        placed_at=datetime(2024, 5, 4, 13, 5, tzinfo=timezone.utc),
        status=OrderStatus.SETTLED,
        instructions="no onions",
    )


def test_bill_lines(order):
    lines = printer.bill_lines(order)
    assert lines[0] == "Bill ORDAB12CD34"
    assert lines[1] == "2024-05-04 13:05"
    assert "2 x Chicken Biryani (Half)" in lines
    assert "    ₹400.00" in lines
    assert "Note: no onions" in lines
    assert lines[-4:] == ["Subtotal ₹480.00", "Tax ₹24.00", "Total ₹504.00", "SETTLED"]
    assert lines.count(printer._SEPARATOR_TOKEN) == 2


def test_bill_lines_without_note(order):
    order.instructions = None
    assert not any(line.startswith("Note:") for line in printer.bill_lines(order))


def test_font_path_env_override(monkeypatch, tmp_path):
    font = tmp_path / "receipt.ttf"
    font.write_bytes(b"")
    monkeypatch.setenv("CANTEEN_PRINTER_FONT_PATH", str(font))
    assert printer.resolve_printer_font_path() == str(font)


def test_font_path_missing_everywhere(monkeypatch, tmp_path):
    monkeypatch.setenv("CANTEEN_PRINTER_FONT_PATH", str(tmp_path / "missing.ttf"))
    monkeypatch.setattr(printer, "PRINTER_FONT_PATH", str(tmp_path / "also-missing.ttf"))
    monkeypatch.setattr(printer, "_LINUX_FONT_FALLBACKS", ())
    with pytest.raises(RuntimeError, match="CANTEEN_PRINTER_FONT_PATH"):
        printer.resolve_printer_font_path()


def test_split_portion_suffix():
    assert printer.split_portion_suffix("2 x Chicken Biryani (Half)") == ("2 x Chicken Biryani", " (Half)")
    assert printer.split_portion_suffix("Subtotal ₹480.00") == ("Subtotal ₹480.00", "")


def test_long_item_line_keeps_portion_label():
    from PIL import Image, ImageDraw, ImageFont

    font = ImageFont.load_default()
    draw = ImageDraw.Draw(Image.new("1", (1, 1), color=1))
    text = "2 x Hyderabadi Chicken Dum Biryani Special (Half)"
    limit = draw.textbbox((0, 0), text, font=font)[2] // 2

    fitted = printer._fit_text_to_px(text, font, limit)
    assert fitted.endswith("... (Half)")
    assert fitted.startswith("2 x ")
    assert draw.textbbox((0, 0), fitted, font=font)[2] <= limit


def test_short_line_is_left_alone():
    from PIL import ImageFont

    font = ImageFont.load_default()
    assert printer._fit_text_to_px("Tax ₹24.00", font, 10_000) == "Tax ₹24.00"
