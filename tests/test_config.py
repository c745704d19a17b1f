"""Tests for settings resolution."""

from pathlib import Path

from claudeline.config import DEFAULT_COMPACT_PCT, load_settings
from usage_quota.core.types import Profile


def test_defaults(tmp_path: Path) -> None:
    settings = load_settings(environ={}, home=tmp_path)
    assert settings.profile == Profile()
    assert settings.debug is False
    assert settings.show_git_tag is False
    assert settings.git_tag_max_len == 30
    assert settings.compact_pct == DEFAULT_COMPACT_PCT
    assert settings.warn_pct == 80


def test_compaction_override(tmp_path: Path) -> None:
    env = {"CLAUDE_AUTOCOMPACT_PCT_OVERRIDE": "60"}
    assert load_settings(environ=env, home=tmp_path).warn_pct == 55


def test_compaction_override_out_of_range(tmp_path: Path) -> None:
    for raw in ("0", "101", "-5", "abc"):
        env = {"CLAUDE_AUTOCOMPACT_PCT_OVERRIDE": raw}
        assert load_settings(environ=env, home=tmp_path).compact_pct == 85


def test_env_file_in_profile_dir(tmp_path: Path) -> None:
    config_dir = tmp_path / "work"
    config_dir.mkdir()
    (config_dir / "claudeline.env").write_text(
        "CLAUDELINE_GIT_TAG=true\nCLAUDELINE_GIT_TAG_MAX_LEN=12\n", encoding="utf-8"
    )
    settings = load_settings(environ={"CLAUDE_CONFIG_DIR": str(config_dir)}, home=tmp_path)
    assert settings.profile == Profile(str(config_dir))
    assert settings.show_git_tag is True
    assert settings.git_tag_max_len == 12


def test_environment_beats_env_file(tmp_path: Path) -> None:
    default_dir = tmp_path / ".claude"
    default_dir.mkdir()
    (default_dir / "claudeline.env").write_text("CLAUDELINE_DEBUG=1\n", encoding="utf-8")
    assert load_settings(environ={}, home=tmp_path).debug is True
    assert load_settings(environ={"CLAUDELINE_DEBUG": "no"}, home=tmp_path).debug is False


def test_invalid_int_falls_back(tmp_path: Path) -> None:
    env = {"CLAUDELINE_GIT_TAG_MAX_LEN": "wide"}
    assert load_settings(environ=env, home=tmp_path).git_tag_max_len == 30
