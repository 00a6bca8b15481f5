
import logging
import os

from filekeeper.core.config import Settings, settings as default_settings

def configure_logging(settings: Settings = default_settings):
    logger = logging.getLogger()
    if logger.hasHandlers():
        return
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    logger.setLevel(logging.INFO)

    fmt = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    eh = logging.FileHandler(os.path.join(settings.LOG_DIR, "error.log"), encoding="utf-8")
    eh.setFormatter(fmt)
    eh.setLevel(logging.ERROR)

    fh = logging.FileHandler(os.path.join(settings.LOG_DIR, "combined.log"), encoding="utf-8")
    fh.setFormatter(fmt)
    fh.setLevel(logging.INFO)

    logger.addHandler(eh)
    logger.addHandler(fh)

    # console output is for local runs only
    if not settings.is_production:
        ch = logging.StreamHandler()
        ch.setFormatter(fmt)
        ch.setLevel(logging.INFO)
        logger.addHandler(ch)
