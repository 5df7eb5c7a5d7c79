import logging

from .config import ConfigError, load_config, resolve_api_key
from .git_ops import (
    GitError, execute, get_changed_files, get_current_branch, get_diff,
    get_file_diff, get_last_commit, get_repo_root, has_pending_changes,
)
from .llm import (
    LLMError, build_batch_prompt, build_commit_prompt, generate_commit_message,
    get_openai_client,
)
from .rules import RULES_FILE_NAME, has_project_rules, load_commit_rules
from .ui import (
    SelectionAborted, ask, confirm, error, heading, select_files, styled, warning,
    BOLD, CYAN, DIM, GREEN, YELLOW,
)

LOG = logging.getLogger("gitgud")

CLEAN_TREE = "No changes to commit. Working tree clean."
RESET_HINT = "Please run 'gg config reset' to update your API key."


def _api_key() -> str | None:
    try:
        return resolve_api_key()
    except ConfigError as e:
        error(str(e))
        print(RESET_HINT)
        return None


def _branch_name() -> str:
    try:
        return get_current_branch()
    except GitError as e:
        warning(f"Could not get current branch name: {e}")
        return "unknown"


def _last_commit():
    try:
        return get_last_commit()
    except GitError as e:
        warning(f"Could not get last commit metadata: {e}")
        return None


def _show_message(title: str, message: str) -> None:
    print(styled(f"\n{title}:\n", BOLD))
    print(styled(message, CYAN))
    print()


def handle_autocommit() -> int:
    """Stage everything and commit it with an AI-generated message."""
    try:
        if not has_pending_changes():
            print(CLEAN_TREE)
            return 0
    except GitError as e:
        error(f"Could not check git status: {e}")
        return 1

    api_key = _api_key()
    if not api_key:
        return 1

    rules = load_commit_rules()
    if not has_project_rules():
        print(styled(f"Note: You can customize the commit message format by creating a {RULES_FILE_NAME} file.", DIM))
        print(styled("      Keep it out of version control by listing it in .gitignore.", DIM))

    print()
    heading("Commit Message Configuration:")
    print(f"Using {rules.source} rules from: {rules.location}\n")

    branch = _branch_name()
    heading("Current Branch Information:")
    print(f"Branch: {branch}\n")

    last_commit = _last_commit()
    heading("Last Commit Information:")
    print(last_commit.describe() if last_commit else "No previous commits found.")
    print()

    try:
        diff = get_diff()
    except GitError as e:
        error(f"Could not get diff: {e}")
        return 1

    if not diff:
        print("No changes detected in tracked files.")
        print("You may need to run 'gg add .' first to stage new files.")
        return 0

    print("Enter additional context for the commit message (press Enter to skip):")
    context = ask("> ")

    print(styled("\nGenerating commit message with AI...", DIM))
    settings = load_config()
    prompt = build_commit_prompt(diff, branch, last_commit, context, rules)
    try:
        message = generate_commit_message(get_openai_client(api_key, settings), prompt, settings.model)
    except LLMError as e:
        error(f"Could not generate commit message: {e}")
        print("This could be due to an invalid or expired API key.")
        print(RESET_HINT)
        return 1

    _show_message("Generated commit message", message)
    if not confirm("Do you want to commit with this message? (y/n): "):
        print("Commit canceled.")
        return 0

    if not execute("add", ["-A"]):
        error("Could not stage changes.")
        return 1
    if not execute("commit", ["-m", message]):
        error("Could not commit changes.")
        return 1
    return 0


def _batch_diff(files: list[str], root: str | None = None) -> tuple[str, list[str]]:
    """Combined diff of *files* and the subset that actually has changes."""
    parts = []
    valid = []
    for path in files:
        try:
            diff = get_file_diff(path, cwd=root)
        except GitError as e:
            warning(f"Could not get diff for {path}: {e}")
            continue
        if not diff:
            warning(f"No changes detected in {path}, skipping.")
            continue
        parts.append(f"--- {path} ---\n{diff}\n")
        valid.append(path)
    return "".join(parts), valid


def _commit_batch(files: list[str], message: str, root: str | None = None) -> bool:
    if not execute("add", ["--", *files], cwd=root):
        error(f"Could not stage {len(files)} file(s).")
        return False
    # commit only these paths, leaving anything else in the index staged
    if not execute("commit", ["-m", message, "--", *files], cwd=root):
        error("Could not commit batch.")
        return False
    print(styled(f"Committed {len(files)} file(s) in one commit.", GREEN))
    return True


def handle_autocommit_per_file(choose=None) -> int:
    """Repeatedly pick a batch of files and commit each batch separately."""
    try:
        root = get_repo_root()
        changed = get_changed_files(cwd=root)
    except GitError as e:
        error(f"Could not get changed files: {e}")
        return 1
    if not changed:
        print(CLEAN_TREE)
        return 0

    api_key = _api_key()
    if not api_key:
        return 1
    settings = load_config()
    client = get_openai_client(api_key, settings)
    rules = load_commit_rules()

    print(styled("=== Autocommit Per File ===", BOLD))
    print("Commit files individually or in batches with AI-generated messages.\n")

    while True:
        try:
            changed = get_changed_files(cwd=root)
        except GitError as e:
            error(f"Could not get changed files: {e}")
            return 1
        if not changed:
            print(CLEAN_TREE)
            break

        print("Changed files:")
        for i, entry in enumerate(changed, 1):
            print(f"  {i}. [{entry.status}] {entry.path}")
        print()

        try:
            selected = select_files([entry.path for entry in changed], choose=choose)
        except SelectionAborted:
            print("Exiting autocommit per file.")
            break
        if not selected:
            print(styled("No files selected.", YELLOW))
            continue

        print(styled(f"\n--- Processing {len(selected)} selected file(s) ---", BOLD))
        for path in selected:
            print(f"  - {path}")
        print()

        diff, files = _batch_diff(selected, root)
        if not files:
            print("No valid files to commit, skipping batch.")
            continue

        context = ask(f"Enter additional context for these {len(files)} file(s) (press Enter to skip): ")
        print(styled(f"Generating commit message for {len(files)} file(s)...", DIM))
        prompt = build_batch_prompt(files, diff, _branch_name(), context, rules)
        try:
            message = generate_commit_message(client, prompt, settings.model)
        except LLMError as e:
            error(f"Could not generate commit message for batch: {e}")
            print(RESET_HINT)
            continue

        _show_message("Generated commit message for batch", message)
        answer = ask("Do you want to commit these files with this message? (y/n/exit): ").lower()
        if answer == "exit":
            print("Exiting autocommit per file.")
            break
        if answer in ("y", "yes"):
            _commit_batch(files, message, root)
        else:
            print(f"Skipped committing batch of {len(files)} file(s).")

        print("\n--- Processing complete ---")
        if not confirm("Continue with remaining files? (y/n): "):
            print("Exiting autocommit per file.")
            break
    return 0
