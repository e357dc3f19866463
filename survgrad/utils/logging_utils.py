import os
import logging

# --- simple logging setup (idempotent) ---
_LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=_LOG_FORMAT)


def get_logger(name="SurvGrad"):
    return logging.getLogger(name)


def ensure_dir(path):
    os.makedirs(path, exist_ok=True)
