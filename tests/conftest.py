import subprocess
from types import SimpleNamespace

import pytest


class FakeGit:
    """Stands in for subprocess.run and answers git invocations from a table."""

    def __init__(self):
        self.responses = {}
        self.calls = []
        self.dirs = []

    def on(self, *args, stdout="", stderr="", returncode=0):
        self.responses[args] = (returncode, stdout, stderr)

    def __call__(self, cmd, **kwargs):
        args = tuple(cmd[1:])
        self.calls.append(args)
        self.dirs.append(kwargs.get("cwd"))
        returncode, stdout, stderr = self.responses.get(args, (0, "", ""))
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    def count(self, *args):
        return self.calls.count(args)


class FakeClient:
    """Minimal object with the `chat.completions.create` shape of OpenAI()."""

    def __init__(self, text="feat: add widget", error=None, choices=True):
        self.text = text
        self.error = error
        self.choices = choices
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every test in an empty directory with no real key sources."""
    home = tmp_path / "home"
    home.mkdir()
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    work = tmp_path / "work"
    work.mkdir()

    monkeypatch.setenv("HOME", str(home))
    for var in ("OPENAI_API_KEY", "OPENAI_BASE_URL", "GG_MODEL", "GG_PROBE_MODEL", "GG_DEBUG"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("gitgud.config.install_dir", lambda: bin_dir)
    monkeypatch.setattr("gitgud.rules.install_dir", lambda: bin_dir)
    monkeypatch.chdir(work)
    return SimpleNamespace(home=home, bin=bin_dir, work=work)


@pytest.fixture
def fake_git(monkeypatch):
    fake = FakeGit()
    monkeypatch.setattr("gitgud.git_ops.subprocess.run", fake)
    return fake


@pytest.fixture
def answers(monkeypatch):
    """Feed scripted lines to input(); running out fails the test."""
    queue = []

    def fake_input(prompt=""):
        if not queue:
            raise AssertionError(f"unexpected prompt: {prompt!r}")
        return queue.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)
    return queue
