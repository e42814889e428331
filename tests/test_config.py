from pathlib import Path

import pytest

from egresspack.config import EgressConfig, load_config, parse_flag
from egresspack.exceptions import EgressConfigError


def test_defaults_match_store_layout(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)

    assert config.baseline_root == tmp_path / "egress" / "artifacts"
    assert config.current_root == tmp_path / "egress" / "current"
    assert config.update_baselines is False
    assert config.fail_on_new is False
    assert config.build_store().baseline_root == config.baseline_root


def test_env_overrides_are_applied(tmp_path: Path) -> None:
    config = EgressConfig.from_env(
        tmp_path,
        environ={"EGRESS_UPDATE": "1", "EGRESS_FAIL_ON_NEW": "false"},
    )

    assert config.update_baselines is True
    assert config.fail_on_new is False


def test_env_without_overrides_returns_same_config(tmp_path: Path) -> None:
    config = EgressConfig(root=tmp_path)

    assert config.with_env({}) is config


def test_invalid_env_flag_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(EgressConfigError, match="EGRESS_UPDATE"):
        EgressConfig.from_env(tmp_path, environ={"EGRESS_UPDATE": "maybe"})


def test_parse_flag_values() -> None:
    assert parse_flag(" Yes ", name="x") is True
    assert parse_flag("off", name="x") is False
    assert parse_flag("", name="x") is False


def test_load_config_from_egress_table(tmp_path: Path) -> None:
    config_path = tmp_path / "Egress.toml"
    config_path.write_text(
        "\n".join(
            [
                "[egress]",
                'root = "project"',
                'artifact_dir = "snapshots/accepted"',
                'current_dir = "snapshots/latest"',
                "fail_on_new = true",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.root == tmp_path / "project"
    assert config.baseline_root == tmp_path / "project" / "snapshots" / "accepted"
    assert config.current_root == tmp_path / "project" / "snapshots" / "latest"
    assert config.fail_on_new is True
    assert config.to_dict()["artifact_dir"] == "snapshots/accepted"


def test_load_config_accepts_top_level_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "Egress.toml"
    config_path.write_text('artifact_dir = "baselines"\n', encoding="utf-8")

    config = load_config(config_path)

    assert config.root == tmp_path
    assert config.baseline_root == tmp_path / "baselines"


def test_load_config_rejects_unknown_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "Egress.toml"
    config_path.write_text('[egress]\nartifacts = "x"\n', encoding="utf-8")

    with pytest.raises(EgressConfigError, match="unknown config key"):
        load_config(config_path)


def test_load_config_rejects_invalid_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "Egress.toml"
    config_path.write_text("[egress\n", encoding="utf-8")

    with pytest.raises(EgressConfigError, match="Invalid config TOML"):
        load_config(config_path)


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"artifact_dir": "/abs/path"}, "relative"),
        ({"current_dir": "../outside"}, "inside root"),
        ({"artifact_dir": "."}, "subdirectory"),
        ({"artifact_dir": "same", "current_dir": "same"}, "must differ"),
        ({"fail_on_new": "yes"}, "boolean"),
    ],
)
def test_invalid_settings_are_rejected(
    tmp_path: Path,
    overrides: dict[str, object],
    message: str,
) -> None:
    with pytest.raises(EgressConfigError, match=message):
        EgressConfig(root=tmp_path, **overrides)  # type: ignore[arg-type]


def test_load_config_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "Egress.toml"

    with pytest.raises(EgressConfigError, match="not found") as excinfo:
        load_config(missing)

    assert str(missing) in str(excinfo.value)
