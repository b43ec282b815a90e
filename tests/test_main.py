from __future__ import annotations

import logging

from canteen.main import configure_logging


def test_configure_logging_writes_to_file(tmp_path):
    path = tmp_path / "logs" / "debug.log"
    logger = logging.getLogger("canteen")
    before = list(logger.handlers)
    try:
        configure_logging(str(path))
        logging.getLogger("canteen.ledger").debug("order_placed order_id=%s", "ORD1")
        for handler in logger.handlers:
            handler.flush()
        assert "order_placed order_id=ORD1" in path.read_text(encoding="utf-8")
    finally:
        for handler in logger.handlers[len(before):]:
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
