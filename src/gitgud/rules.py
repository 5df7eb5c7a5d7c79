import logging
from pathlib import Path

from .config import install_dir
from .models import CommitRules

LOG = logging.getLogger("gitgud")

RULES_FILE_NAME = ".autocommit.md"
DEFAULT_RULES = "Please follow the Conventional Commits format: <type>(<scope>): <description>"
BUILT_IN = CommitRules(rules=DEFAULT_RULES, source="built-in")


def _read_rules(path: Path) -> str | None:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        LOG.warning("could not read commit rules from %s: %s", path, e)
        return None


def has_project_rules(cwd: Path | None = None) -> bool:
    return (Path(cwd or Path.cwd()) / RULES_FILE_NAME).is_file()


def load_commit_rules(cwd: Path | None = None) -> CommitRules:
    """Project `.autocommit.md`, then the one next to the executable, then built-in."""
    candidates = [
        ("project", Path(cwd or Path.cwd()) / RULES_FILE_NAME),
        ("default", install_dir() / RULES_FILE_NAME),
    ]
    for source, path in candidates:
        text = _read_rules(path)
        if text is not None:
            return CommitRules(rules=text, source=source, path=str(path))
    return BUILT_IN
