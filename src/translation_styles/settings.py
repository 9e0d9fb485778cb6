from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class Settings:
    data_root: Path
    store_namespace: str
    default_source_lang: str
    default_target_lang: str
    log_level: str
    log_file: Path | None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_root = Path(os.getenv("DATA_ROOT", "./data")).resolve()
    data_root.mkdir(parents=True, exist_ok=True)
    log_file = os.getenv("LOG_FILE", "").strip()
    return Settings(
        data_root=data_root,
        store_namespace=os.getenv("STYLE_STORE_NAMESPACE", "translation_styles"),
        default_source_lang=os.getenv("DEFAULT_SOURCE_LANG", "en"),
        default_target_lang=os.getenv("DEFAULT_TARGET_LANG", "es"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file) if log_file else None,
    )
