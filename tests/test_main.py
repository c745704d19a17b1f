"""End-to-end tests for the claudeline command."""

import io
import json
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from claudeline import git_info
from claudeline.git_info import current_branch, current_tag
from claudeline.main import configure_debug_log, main
from claudeline.render import NBSP
from usage_quota.core.types import Profile, QuotaSnapshot, QuotaWindow
from usage_quota.credential_store import CredentialsFileResolver, CredentialStore

SESSION = json.dumps(
    {"model": {"display_name": "Opus"}, "context_window": {"used_percentage": 42}}
)


class StaticResolver:
    name = "file"

    def __init__(self, payload: Optional[str]):
        self.payload = payload

    def lookup(self, profile: Profile) -> Optional[str]:
        return self.payload


class StubService:
    def __init__(self, snapshot: Optional[QuotaSnapshot] = None):
        self.snapshot = snapshot
        self.calls: List[Tuple[str, Profile]] = []

    def get_quota(self, token: str, profile: Profile) -> Optional[QuotaSnapshot]:
        self.calls.append((token, profile))
        return self.snapshot


def store_with(sub_type: str = "max", token: str = "tok") -> CredentialStore:
    payload = json.dumps(
        {"claudeAiOauth": {"accessToken": token, "subscriptionType": sub_type}}
    )
    return CredentialStore([StaticResolver(payload)])


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    for name in (
        "CLAUDE_CONFIG_DIR",
        "CLAUDE_AUTOCOMPACT_PCT_OVERRIDE",
        "CLAUDELINE_DEBUG",
        "CLAUDELINE_GIT_TAG",
        "CLAUDELINE_GIT_TAG_MAX_LEN",
        "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CLAUDE_CONFIG_DIR", str(tmp_path / "profile"))
    monkeypatch.chdir(tmp_path)


def run(
    argv=(), stdin: str = SESSION, store=None, service=None
) -> Tuple[int, str]:
    out = io.StringIO()
    code = main(
        list(argv),
        stdin=io.StringIO(stdin),
        stdout=out,
        store=store or store_with(),
        service=service or StubService(),
    )
    return code, out.getvalue().replace(NBSP, " ")


def test_renders_usage_bars() -> None:
    snap = QuotaSnapshot(QuotaWindow(50), QuotaWindow(95))
    code, out = run(service=StubService(snap))
    assert code == 0
    assert "[Opus | Max]" in out
    assert "42%" in out
    assert "50%" in out
    assert "95%" in out
    assert out.endswith("\n")


def test_passes_token_and_profile(tmp_path: Path) -> None:
    service = StubService()
    run(service=service)
    assert service.calls == [("tok", Profile(str(tmp_path / "profile")))]


def test_missing_credentials_still_renders() -> None:
    service = StubService()
    code, out = run(store=CredentialStore([StaticResolver(None)]), service=service)
    assert code == 0
    assert "[Opus]" in out
    assert "42%" in out
    assert service.calls == []


def test_corrupt_credentials_still_renders() -> None:
    service = StubService()
    code, out = run(store=CredentialStore([StaticResolver("{")]), service=service)
    assert code == 0
    assert "[Opus]" in out
    assert service.calls == []


def test_undecodable_credentials_file_still_renders(tmp_path: Path) -> None:
    profile_dir = tmp_path / "profile"
    profile_dir.mkdir()
    (profile_dir / ".credentials.json").write_bytes(b"\x80\x81{}")
    service = StubService()
    code, out = run(store=CredentialStore([CredentialsFileResolver()]), service=service)
    assert code == 0
    assert "[Opus]" in out
    assert service.calls == []


@pytest.mark.parametrize("value", ["1e400", "-1e400", "NaN", "1" + "0" * 400])
def test_non_finite_context_reads_as_zero(value: str) -> None:
    stdin = '{"model": {"display_name": "Opus"}, "context_window": {"used_percentage": '
    code, out = run(stdin=stdin + value + "}}")
    assert code == 0
    assert "0%" in out


def test_unknown_plan_skips_usage() -> None:
    service = StubService(QuotaSnapshot(QuotaWindow(50), QuotaWindow(95)))
    code, out = run(store=store_with(sub_type="enterprise"), service=service)
    assert code == 0
    assert service.calls == []
    assert "50%" not in out


def test_failed_usage_omits_bars() -> None:
    code, out = run(service=StubService(None))
    assert code == 0
    assert out.count("%") == 1


def test_invalid_stdin_exits_1(capsys) -> None:
    code, out = run(stdin="not json")
    assert code == 1
    assert out == ""
    assert "claudeline: parse stdin JSON" in capsys.readouterr().err


def test_version() -> None:
    code, out = run(["--version"])
    assert code == 0
    assert out.strip()


def test_branch_and_tag(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/feature/x\n", encoding="utf-8")
    monkeypatch.setattr("claudeline.main.current_tag", lambda cwd=None: "v2.0.0")

    _, without_tag = run()
    assert "feature/x" in without_tag
    assert "v2.0.0" not in without_tag

    _, with_tag = run(["--git-tag"])
    assert "v2.0.0" in with_tag


def test_debug_log(tmp_path: Path, monkeypatch) -> None:
    log_file = tmp_path / "debug.log"
    monkeypatch.setattr("claudeline.main.DEBUG_LOG_FILE", log_file)
    try:
        run(["--debug"], store=CredentialStore([StaticResolver(None)]))
    finally:
        configure_debug_log(False)
    content = log_file.read_text(encoding="utf-8")
    assert "credentials: no credentials found" in content
    assert "usage: no access token found" in content


class TestGitInfo:
    def test_branch_from_head(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
        assert current_branch(tmp_path) == "main"

    def test_detached_head(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "HEAD").write_text("4b825dc642cb6eb9a060e54bf8d69288fbee4904\n")
        assert current_branch(tmp_path) == ""

    def test_not_a_repo(self, tmp_path: Path) -> None:
        assert current_branch(tmp_path) == ""

    def test_first_tag(self, monkeypatch, tmp_path: Path) -> None:
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout="v1.0\nv1.0-rc1\n", stderr="")

        monkeypatch.setattr(git_info.subprocess, "run", fake_run)
        assert current_tag(tmp_path) == "v1.0"

    def test_git_missing(self, monkeypatch, tmp_path: Path) -> None:
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(git_info.subprocess, "run", fake_run)
        assert current_tag(tmp_path) == ""
