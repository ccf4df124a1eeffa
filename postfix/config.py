from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_MAX_DEPTH = 10_000

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def repo_root() -> Path:
    # Project root is the directory that contains the `postfix/` package.
    return Path(__file__).resolve().parents[1]


def load_env() -> None:
    # Prefer a project-local `.env`; fall back to searching from CWD.
    root_env = repo_root() / ".env"
    env_path = str(root_env) if root_env.exists() else (find_dotenv(usecwd=True) or str(root_env))
    load_dotenv(env_path)


class PostfixSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)
    max_steps: int | None = Field(default=None, ge=1)
    log_level: str = "WARNING"
    strict_codegen: bool = False

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level


def _env_int(name: str) -> int | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def load_settings() -> PostfixSettings:
    load_env()
    values: dict[str, object] = {
        "max_steps": _env_int("POSTFIX_MAX_STEPS"),
        "log_level": os.getenv("POSTFIX_LOG_LEVEL") or "WARNING",
        "strict_codegen": _env_bool("POSTFIX_STRICT_CODEGEN"),
    }
    max_depth = _env_int("POSTFIX_MAX_DEPTH")
    if max_depth is not None:
        values["max_depth"] = max_depth
    try:
        return PostfixSettings.model_validate(values)
    except ValidationError as e:
        err = e.errors()[0]
        name = "POSTFIX_" + str(err["loc"][0]).upper()
        raise ValueError(f"{name}: {err['msg']}") from e


def configure_logging(settings: PostfixSettings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(name)s: %(levelname)s: %(message)s",
    )
