# app/logging_config.py

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """
    ルートロガーにコンソール用ハンドラを1つだけ付ける。
    uvicorn の reload などで複数回呼ばれても重複しないようにする。
    """
    root = logging.getLogger()

    if not any(getattr(h, "_seo_analyzer", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        handler._seo_analyzer = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    root.setLevel(level.upper())
