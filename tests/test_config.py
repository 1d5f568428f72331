import pytest

from refund_split.config import load_config


def test_defaults(tmp_path, monkeypatch):
    for name in ("LO_EXTRACTION_CAP", "TRAILING_PAGES", "LO_DOMAIN_MARKERS", "LO_FALLBACK_PATTERN", "LO_CODE_MAX"):
        monkeypatch.delenv(name, raising=False)
    cfg = load_config(out_root=str(tmp_path / "out"))
    assert cfg.out_root.is_dir()
    assert cfg.extraction_cap == 20
    assert cfg.trailing_pages is None
    assert cfg.domain_markers == ()
    assert (cfg.code_min, cfg.code_max) == (0, 800)
    assert cfg.fallback_pattern is False


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("LO_EXTRACTION_CAP", "5")
    monkeypatch.setenv("TRAILING_PAGES", "2")
    monkeypatch.setenv("LO_DOMAIN_MARKERS", "Cash, Check")
    monkeypatch.setenv("LO_CODE_MAX", "none")
    monkeypatch.setenv("LO_FALLBACK_PATTERN", "1")
    cfg = load_config(out_root=str(tmp_path))
    assert cfg.extraction_cap == 5
    assert cfg.trailing_pages == 2
    assert cfg.domain_markers == ("Cash", "Check")
    assert cfg.code_max is None
    assert cfg.fallback_pattern is True


def test_arguments_win_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("TRAILING_PAGES", "2")
    cfg = load_config(out_root=str(tmp_path), trailing_pages=0, extraction_cap=3, domain_markers=("Cash",))
    assert cfg.trailing_pages == 0
    assert cfg.extraction_cap == 3
    assert cfg.domain_markers == ("Cash",)


def test_invalid_values_are_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("TRAILING_PAGES", "-1")
    with pytest.raises(ValueError):
        load_config(out_root=str(tmp_path))


def test_explicit_zero_cap_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("LO_EXTRACTION_CAP", "5")
    with pytest.raises(ValueError):
        load_config(out_root=str(tmp_path), extraction_cap=0)


def test_cap_cannot_be_disabled(tmp_path, monkeypatch):
    monkeypatch.setenv("LO_EXTRACTION_CAP", "none")
    with pytest.raises(ValueError):
        load_config(out_root=str(tmp_path))
