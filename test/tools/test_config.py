"""
Test configuration models.
"""

from pathlib import Path

from pydantic import ValidationError
from pytest import mark, raises

from notion_mirror.core.session import DEFAULT_BASE_URL
from notion_mirror.tools.config import Config, InstanceConfig


@mark.parametrize(
    "base_url",
    [
        "https://api.example.com",
        "https://api.example.com/",
        "https://api.example.com/v1",
        "https://api.example.com/v1/",
    ],
)
def test_base_url(base_url: str):
    instance = InstanceConfig(token="secret", base_url=base_url)
    assert instance.base_url == "https://api.example.com"


def test_defaults():
    instance = InstanceConfig(token=" secret\n")

    assert instance.token == "secret"
    assert instance.base_url == DEFAULT_BASE_URL
    assert instance.refresh_ttl == 60.0


def test_empty_token():
    with raises(ValidationError):
        InstanceConfig(token="  ")


def test_sync_dir():
    instance = InstanceConfig(token="secret", sync_dir="~/notes")

    assert instance.sync_dir == Path.home() / "notes"
    assert instance.model_dump(mode="json")["sync_dir"] == str(
        Path.home() / "notes"
    )


def test_yaml(tmp_path: Path):
    path = tmp_path / "notion-mirror.yaml"
    config = Config(
        instances={
            "work": InstanceConfig(
                token="secret-1", sync_dir=tmp_path / "work", refresh_ttl=5.0
            ),
            "home": InstanceConfig(token="secret-2"),
        }
    )

    config.dump_yaml(path)
    text = path.read_text(encoding="utf-8")

    assert "secret-1" in text
    assert "notion_version" not in text
    assert Config.load_yaml(path) == config


def test_yaml_not_mapping(tmp_path: Path):
    path = tmp_path / "notion-mirror.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with raises(ValueError):
        Config.load_yaml(path)
