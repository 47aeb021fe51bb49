"""
sad configuration loader.

Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (SAD_*)
    3) Config file (TOML or JSON)
    4) Built-in defaults (lowest)

Only the knobs a caller of this package actually turns live here: the
default digest code and serialization kind for new records, the SAID field
label, the identity allow-set used when decoding, worker-pool size for batch
verification, and logging.

File shape (TOML)::

    [sad]
    default_code = "E"
    default_kind = "JSON"
    label = "d"
    idents = ["ACDC"]
    max_workers = 8
    log_level = "INFO"
    log_format = "text"

A flat file without the ``[sad]`` table is accepted too.
"""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError
from .matter import DIGEST_CODES, DigDex
from .versioning import IDENTS, KINDS, Serials

ENV_PREFIX = "SAD_"
LOG_FORMATS = ("json", "text")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _split_list(v: str) -> List[str]:
    return [s.strip() for s in v.split(",") if s.strip()]


def _env_int(name: str) -> int:
    v = os.environ[name]
    try:
        return int(v, 0)
    except ValueError as e:
        raise ConfigError(f"{name} must be int, got {v!r}", env=name).with_cause(e) from e


# ------------------------------
# Typed configuration model
# ------------------------------


@dataclass
class Config:
    default_code: str = DigDex.Blake3_256
    default_kind: str = Serials.JSON
    label: str = "d"
    idents: List[str] = field(default_factory=lambda: sorted(IDENTS))
    max_workers: int = 4
    log_level: str = "WARNING"
    log_format: Optional[str] = None  # None → TTY detection

    def validate(self) -> None:
        if self.default_code not in DIGEST_CODES:
            raise ConfigError(f"default_code {self.default_code!r} is not a digest code")
        if self.default_kind not in KINDS:
            raise ConfigError(f"default_kind {self.default_kind!r} is not a serialization kind")
        if not self.label:
            raise ConfigError("label must be non-empty")
        unknown = sorted(set(self.idents) - IDENTS)
        if not self.idents or unknown:
            raise ConfigError("idents must be a non-empty subset of known identities", unknown=unknown)
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"unknown log_level {self.log_level!r}")
        if self.log_format is not None and self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}", path=str(path))
    suffix = path.suffix.lower()
    try:
        with path.open("rb") as f:
            if suffix in {".toml", ".tml"}:
                data = tomllib.load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError(f"unsupported config format: {suffix}. Use .toml or .json")
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot parse {path}: {e}", path=str(path)).with_cause(e) from e
    if not isinstance(data, dict):
        raise ConfigError("config file must hold a table", path=str(path))
    section = data.get("sad", data)
    if not isinstance(section, dict):
        raise ConfigError("[sad] must be a table", path=str(path))
    return section


def _from_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    env = os.environ
    if "SAD_CODE" in env:
        out["default_code"] = env["SAD_CODE"].strip()
    if "SAD_KIND" in env:
        out["default_kind"] = env["SAD_KIND"].strip().upper()
    if "SAD_LABEL" in env:
        out["label"] = env["SAD_LABEL"].strip()
    if "SAD_IDENTS" in env:
        out["idents"] = _split_list(env["SAD_IDENTS"])
    if "SAD_MAX_WORKERS" in env:
        out["max_workers"] = _env_int("SAD_MAX_WORKERS")
    if "SAD_LOG_LEVEL" in env:
        out["log_level"] = env["SAD_LOG_LEVEL"].strip().upper()
    if "SAD_LOG_FORMAT" in env:
        out["log_format"] = env["SAD_LOG_FORMAT"].strip().lower() or None
    return out


# ------------------------------
# Main loader
# ------------------------------


def load(config_file: Optional[str | Path] = None, **overrides: Any) -> Config:
    """
    Load configuration. Precedence: overrides > env > file > defaults.

    Unknown keys and invalid values raise ConfigError. Overrides set to None
    are ignored, so CLI options can be passed through unconditionally.
    """
    base: Dict[str, Any] = asdict(Config())
    known = {f.name for f in fields(Config)}

    layers = []
    if config_file:
        layers.append(("file", _load_file(_expand(config_file))))
    layers.append(("env", _from_env()))
    layers.append(("overrides", {k: v for k, v in overrides.items() if v is not None}))

    for source, layer in layers:
        unknown = sorted(set(layer) - known)
        if unknown:
            raise ConfigError(f"unknown config keys in {source}", keys=unknown)
        base.update(layer)

    idents = base["idents"]
    if isinstance(idents, str):
        idents = _split_list(idents)
    try:
        cfg = Config(
            default_code=str(base["default_code"]),
            default_kind=str(base["default_kind"]).upper(),
            label=str(base["label"]),
            idents=sorted(set(idents)),
            max_workers=int(base["max_workers"]),
            log_level=str(base["log_level"]).upper(),
            log_format=str(base["log_format"]).lower() if base["log_format"] else None,
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid config value: {e}").with_cause(e) from e

    cfg.validate()
    return cfg


__all__ = ["Config", "ConfigError", "load", "ENV_PREFIX"]
