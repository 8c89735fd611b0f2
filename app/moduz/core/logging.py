from __future__ import annotations

import json
import logging

from app.moduz.core.config import settings


def configure_logging(level: str | None = None) -> None:
    # Records are already JSON, so the format is the bare message.
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format="%(message)s")


def log_json(logger: logging.Logger, payload: dict, level: int = logging.INFO) -> None:
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
