import pytest
from pydantic import ValidationError

from dock_underwriting.adapters.config import AppConfig


def test_defaults():
    cfg = AppConfig()
    assert cfg.PRICE_SEARCH_STEP == 5_000.0
    assert cfg.PRICE_SEARCH_FLOOR_PCT == 0.70
    assert cfg.PRICE_SEARCH_CEILING_PCT == 1.30
    assert cfg.PRICE_SEARCH_MIN_PRICE == 50_000.0
    assert cfg.TARGET_DSCR == 1.25
    assert cfg.MIN_RENT_GROWTH == 0.02
    assert cfg.MAX_MARKET_VACANCY == 0.08


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DOCK_TARGET_CAP_RATE", "7%")
    monkeypatch.setenv("DOCK_DEFAULT_LTV", "80")
    monkeypatch.setenv("DOCK_PRICE_SEARCH_STEP", "2500")
    monkeypatch.setenv("dock_log_level", "debug")

    cfg = AppConfig()
    assert cfg.TARGET_CAP_RATE == pytest.approx(0.07)
    assert cfg.DEFAULT_LTV == pytest.approx(0.80)
    assert cfg.PRICE_SEARCH_STEP == 2_500.0
    assert cfg.LOG_LEVEL == "debug"


def test_fraction_passthrough(monkeypatch):
    monkeypatch.setenv("DOCK_DEFAULT_INTEREST_RATE", "0.065")
    assert AppConfig().DEFAULT_INTEREST_RATE == pytest.approx(0.065)


@pytest.mark.parametrize(
    "name, value",
    [
        ("DOCK_TARGET_CAP_RATE", "-0.01"),
        ("DOCK_TARGET_CAP_RATE", "not-a-rate"),
        ("DOCK_TARGET_DSCR", "0"),
        ("DOCK_TARGET_DSCR", "0.95"),
        ("DOCK_PRICE_SEARCH_STEP", "0"),
        ("DOCK_BISECTION_TOLERANCE", "-1"),
        ("DOCK_MAX_MARKET_VACANCY", "-5"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        AppConfig()
