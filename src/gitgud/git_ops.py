import logging
import subprocess
from pathlib import Path

from .models import ChangedFile, LastCommit
from .ui import error

LOG = logging.getLogger("gitgud")

GIT = "git"
UNTRACKED_PREVIEW_LIMIT = 2000
CONFIRMATIONS = {
    "init": "GitGud repository initialized successfully!",
    "commit": "Changes committed successfully!",
}


class GitError(RuntimeError):
    """A git query failed or produced output we cannot use."""


def _git(args: list[str], cwd: str | None = None) -> subprocess.CompletedProcess:
    LOG.debug("git %s", " ".join(args))
    try:
        return subprocess.run(
            [GIT] + args,
            capture_output=True, text=True, cwd=cwd,
            encoding="utf-8", errors="replace",
            timeout=120,
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git {' '.join(args)} timed out")


def run_git(args: list[str], cwd: str | None = None, strip: bool = True) -> str:
    result = _git(args, cwd=cwd)
    if result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed:\n{result.stderr.strip()}")
    return result.stdout.strip() if strip else result.stdout


def execute(command: str, args=(), cwd: str | None = None) -> bool:
    """Run ``git <command> <args>`` attached to the user's terminal.

    Output, pagers and prompts pass straight through. Returns True when git
    exits with status 0.
    """
    cmd = [GIT, command, *args]
    LOG.debug("exec %s", " ".join(cmd))
    try:
        returncode = subprocess.run(cmd, cwd=cwd).returncode
    except FileNotFoundError:
        error("git is not installed or not on PATH.")
        return False

    if returncode != 0:
        LOG.debug("git %s exited with %d", command, returncode)
        return False
    if command in CONFIRMATIONS:
        print(CONFIRMATIONS[command])
    return True


# ──────────────────────────────────────────────
# Repository queries
# ──────────────────────────────────────────────
def has_pending_changes(cwd: str | None = None) -> bool:
    return bool(run_git(["status", "--porcelain"], cwd=cwd))


def get_diff(cwd: str | None = None) -> str:
    """Staged and unstaged changes for the whole tree, plus untracked paths."""
    diff = run_git(["diff", "--staged"], cwd=cwd, strip=False)
    diff += run_git(["diff"], cwd=cwd, strip=False)

    untracked = run_git(["ls-files", "--others", "--exclude-standard"], cwd=cwd)
    if untracked:
        diff += "\n\nUntracked files:\n"
        diff += "".join(f"  {path}\n" for path in untracked.splitlines())
    return diff


def get_file_diff(path: str, cwd: str | None = None) -> str:
    diff = run_git(["diff", "--staged", "--", path], cwd=cwd, strip=False)
    diff += run_git(["diff", "--", path], cwd=cwd, strip=False)

    status = run_git(["status", "--porcelain", "--", path], cwd=cwd, strip=False)
    if status.startswith("??"):
        diff += f"\nNew file: {path}"
        file_path = Path(cwd or ".") / path
        try:
            content = file_path.read_bytes()
        except OSError as e:
            LOG.debug("no preview for %s: %s", path, e)
        else:
            if len(content) < UNTRACKED_PREVIEW_LIMIT:
                diff += "\nFile content:\n" + content.decode("utf-8", errors="replace")
    return diff


def get_repo_root(cwd: str | None = None) -> str:
    """Top-level directory of the work tree; porcelain paths are relative to it."""
    return run_git(["rev-parse", "--show-toplevel"], cwd=cwd)


def get_current_branch(cwd: str | None = None) -> str:
    return run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)


def has_commits(cwd: str | None = None) -> bool:
    result = _git(["rev-parse", "--verify", "--quiet", "HEAD"], cwd=cwd)
    if result.returncode == 0:
        return True
    if result.returncode == 1:
        return False
    raise GitError(f"git rev-parse failed:\n{result.stderr.strip()}")


def get_last_commit(cwd: str | None = None) -> LastCommit | None:
    """Metadata of HEAD, or None when the repository has no commits yet."""
    if not has_commits(cwd=cwd):
        return None
    line = run_git(["log", "-1", "--pretty=format:%h|%an|%ad|%s"], cwd=cwd)
    parts = line.split("|", 3)
    if len(parts) != 4:
        raise GitError(f"unexpected commit metadata format: {line!r}")
    return LastCommit(*parts)


# ──────────────────────────────────────────────
# Changed files
# ──────────────────────────────────────────────
def _status_letter(code: str) -> str:
    if code == "??":
        return "?"
    return code.strip()[:1] or "M"


def _unquote(path: str) -> str:
    """Undo git's C-style path quoting, e.g. ``"caf\\303\\251.txt"`` -> ``café.txt``."""
    if len(path) >= 2 and path[0] == path[-1] == '"':
        # octal escapes are UTF-8 bytes; round-trip through latin-1 to rejoin them
        inner = path[1:-1].encode("utf-8").decode("unicode_escape")
        return inner.encode("latin-1").decode("utf-8", errors="replace")
    return path


def parse_status(output: str) -> list[ChangedFile]:
    """Parse ``git status --porcelain`` output, one entry per line."""
    entries = []
    for line in output.splitlines():
        if not line.strip():
            continue
        code, path = line[:2], line[2:].strip()
        if ("R" in code or "C" in code) and " -> " in path:
            path = path.split(" -> ", 1)[1].strip()
        entries.append(ChangedFile(path=_unquote(path), status=_status_letter(code)))
    return entries


def _untracked_in(directory: str, cwd: str | None = None) -> list[str]:
    out = run_git(["ls-files", "--others", "--exclude-standard", "--", directory], cwd=cwd)
    return [_unquote(line) for line in out.splitlines() if line]


def get_changed_files(cwd: str | None = None) -> list[ChangedFile]:
    """Changed files with untracked directories expanded into their files."""
    output = run_git(["status", "--porcelain"], cwd=cwd, strip=False)
    files = []
    for entry in parse_status(output):
        if not entry.path.endswith("/"):
            files.append(entry)
            continue
        try:
            contents = _untracked_in(entry.path, cwd=cwd)
        except GitError as e:
            LOG.debug("could not expand %s: %s", entry.path, e)
            contents = []
        if contents:
            files.extend(ChangedFile(path=p, status=entry.status) for p in contents)
        else:
            files.append(entry)
    return files
