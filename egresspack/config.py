"""Explicit configuration for Egress sessions and stores."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
import tomllib
from typing import Any

from egresspack.exceptions import EgressConfigError
from egresspack.store.store import DEFAULT_ARTIFACT_DIR, DEFAULT_CURRENT_DIR, ArtifactStore

CONFIG_FILENAME = "Egress.toml"
UPDATE_ENV_VAR = "EGRESS_UPDATE"
FAIL_ON_NEW_ENV_VAR = "EGRESS_FAIL_ON_NEW"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


@dataclass(slots=True)
class EgressConfig:
    """Where the artifact store lives and how closed sessions are judged.

    `root` is resolved by the caller; Egress never searches for it.
    """

    root: Path = Path(".")
    artifact_dir: Path = DEFAULT_ARTIFACT_DIR
    current_dir: Path = DEFAULT_CURRENT_DIR
    update_baselines: bool = False
    fail_on_new: bool = False

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.artifact_dir = _relative_dir(self.artifact_dir, field_name="artifact_dir")
        self.current_dir = _relative_dir(self.current_dir, field_name="current_dir")
        if self.artifact_dir == self.current_dir:
            raise EgressConfigError("artifact_dir and current_dir must differ")
        for flag in ("update_baselines", "fail_on_new"):
            if not isinstance(getattr(self, flag), bool):
                raise EgressConfigError(f"{flag} must be a boolean")

    @property
    def baseline_root(self) -> Path:
        return self.root / self.artifact_dir

    @property
    def current_root(self) -> Path:
        return self.root / self.current_dir

    def build_store(self) -> ArtifactStore:
        return ArtifactStore(
            self.root,
            artifact_dir=self.artifact_dir,
            current_dir=self.current_dir,
        )

    def with_env(self, environ: Mapping[str, str] | None = None) -> "EgressConfig":
        """Return a copy with `EGRESS_UPDATE` / `EGRESS_FAIL_ON_NEW` overrides applied."""
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        if UPDATE_ENV_VAR in env:
            overrides["update_baselines"] = parse_flag(env[UPDATE_ENV_VAR], name=UPDATE_ENV_VAR)
        if FAIL_ON_NEW_ENV_VAR in env:
            overrides["fail_on_new"] = parse_flag(
                env[FAIL_ON_NEW_ENV_VAR],
                name=FAIL_ON_NEW_ENV_VAR,
            )
        return replace(self, **overrides) if overrides else self

    @classmethod
    def from_env(
        cls,
        root: str | Path = ".",
        *,
        environ: Mapping[str, str] | None = None,
    ) -> "EgressConfig":
        return cls(root=Path(root)).with_env(environ)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, base_dir: str | Path = ".") -> "EgressConfig":
        """Build config from a mapping; a relative `root` is resolved against `base_dir`."""
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise EgressConfigError(f"unknown config key(s): {', '.join(unknown)}")

        values = dict(raw)
        root = Path(values.pop("root", "."))
        if not root.is_absolute():
            root = Path(base_dir) / root
        return cls(root=root, **values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "artifact_dir": self.artifact_dir.as_posix(),
            "current_dir": self.current_dir.as_posix(),
            "update_baselines": self.update_baselines,
            "fail_on_new": self.fail_on_new,
        }


def load_config(path: str | Path) -> EgressConfig:
    """Load config from an explicit `Egress.toml` file.

    Settings may live at the top level or under an `[egress]` table.
    """
    config_path = Path(path)
    try:
        with config_path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as error:
        raise EgressConfigError(f"Config file not found: {config_path}") from error
    except tomllib.TOMLDecodeError as error:
        raise EgressConfigError(f"Invalid config TOML ({config_path}): {error}") from error

    table = raw.get("egress", raw)
    if not isinstance(table, dict):
        raise EgressConfigError(f"[egress] must be a table ({config_path})")
    return EgressConfig.from_mapping(table, base_dir=config_path.parent)


def parse_flag(value: str, *, name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise EgressConfigError(f"{name} must be a boolean flag, got {value!r}")


def _relative_dir(value: Any, *, field_name: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        raise EgressConfigError(f"{field_name} must be relative to root: {value}")
    if ".." in path.parts:
        raise EgressConfigError(f"{field_name} must stay inside root: {value}")
    if path == Path("."):
        raise EgressConfigError(f"{field_name} must name a subdirectory of root")
    return path
