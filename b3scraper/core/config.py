import os
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = "config/settings.yaml"


class Config:
    _config = None

    @classmethod
    def load(cls, path=None):
        if cls._config is None:
            path = Path(path or os.getenv("B3SCRAPER_CONFIG") or DEFAULT_CONFIG_PATH)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    cls._config = yaml.safe_load(f) or {}
            except FileNotFoundError:
                cls._config = {}
        return cls._config

    @classmethod
    def get(cls, *keys, default=None):
        cfg = cls.load()
        for key in keys:
            if not isinstance(cfg, dict):
                return default
            cfg = cfg.get(key)
        return cfg if cfg is not None else default

    @classmethod
    def reset(cls):
        cls._config = None
