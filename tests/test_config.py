from __future__ import annotations

import pytest

from roster.config import Config, normalize_prefix


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("HOST", "PORT", "ROUTE_PREFIX", "SEED", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    cfg = Config()
    assert cfg.host == "localhost"
    assert cfg.port == 8080
    assert cfg.route_prefix == "/users"
    assert cfg.seed is True
    assert cfg.log_level == "INFO"


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "0")
    monkeypatch.setenv("ROUTE_PREFIX", "Student/")
    monkeypatch.setenv("SEED", "off")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    cfg = Config()
    assert cfg.host == "0.0.0.0"
    assert cfg.port == 0
    assert cfg.route_prefix == "/Student"
    assert cfg.seed is False
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("PORT", "-1"),
        ("PORT", "65536"),
        ("PORT", "http"),
        ("ROUTE_PREFIX", "/"),
        ("SEED", "maybe"),
        ("LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        Config()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("/users", "/users"), ("users/", "/users"), (" //Student// ", "/Student"), ("/a/b/", "/a/b")],
)
def test_normalize_prefix(raw: str, expected: str) -> None:
    assert normalize_prefix(raw) == expected


def test_normalize_prefix_rejects_root() -> None:
    with pytest.raises(ValueError):
        normalize_prefix(" / ")
