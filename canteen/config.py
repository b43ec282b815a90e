"""Runtime configuration defaults for ordering, logging and printing."""

from __future__ import annotations

import os

TAX_RATE = 0.05
CANCELLATION_WINDOW_SECONDS = 60

MIN_SECRET_LENGTH = 6
MIN_NAME_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 10
MIN_FEEDBACK_COMMENT_LENGTH = 10

# Menu availability is re-evaluated on this interval by the UI.
AVAILABILITY_REFRESH_SECONDS = 60

RECOMMENDATION_TIMEOUT_SECONDS = float(os.environ.get("CANTEEN_RECOMMENDATION_TIMEOUT", "20"))

DEBUG_LOG_PATH = os.environ.get("CANTEEN_DEBUG_LOG", "/tmp/canteen-debug.log")

CURRENCY_SYMBOL = "₹"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 16
PRINTER_TAIL_SPACER_PX = 70
