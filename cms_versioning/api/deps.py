import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Header

from cms_versioning.adapters.clock import SystemClock
from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo, SQLiteVersionRepo
from cms_versioning.rules.loader import DEFAULT_RULES_PATH, load_rules
from cms_versioning.rules.models import Rules

ANONYMOUS_ACTOR = "anonymous"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("CMS_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "cms.db")
        rules_env = os.environ.get("CMS_RULES_PATH")
        self.rules_path = Path(rules_env) if rules_env else DEFAULT_RULES_PATH


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Repos ---
def get_version_repo(settings: Settings = Depends(get_settings)) -> SQLiteVersionRepo:
    return SQLiteVersionRepo(settings.db_path)


def get_block_repo(settings: Settings = Depends(get_settings)) -> SQLiteBlockRepo:
    return SQLiteBlockRepo(settings.db_path)


def get_clock() -> SystemClock:
    return SystemClock()


# --- Actor ---
def get_actor(x_actor_id: Annotated[str | None, Header()] = None) -> str:
    """
    Opaque id of the caller, recorded in audit fields.

    Authentication happens upstream; the id is trusted as given.
    """
    if x_actor_id and x_actor_id.strip():
        return x_actor_id.strip()
    return ANONYMOUS_ACTOR
