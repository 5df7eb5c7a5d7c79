import argparse
import textwrap

from .autocommit import handle_autocommit, handle_autocommit_per_file
from .config import handle_config
from .git_ops import GitError, execute, get_last_commit
from .models import Command
from .ui import error, heading

USAGE = textwrap.dedent("""\
    GitGud - A wrapper around Git
    Usage: gg <command> [<args>]

    Available commands:
      init                           Initialize a new repository
      add <file>                     Add file contents to the index
      commit -m <message>            Record changes to the repository
      status                         Show the working tree status
      log                            Show commit logs
      diff                           Show changes between commits, commit and working tree, etc
      autocommit (or ac)             Stage all changes and commit them with an AI-generated message
      autocommit-per-file (or acpf)  Interactively select and batch commit files with AI-generated messages
      config [reset]                 View or reset your API key configuration
      last                           Show information about the last commit
      branch                         List, create, or delete branches
      checkout                       Switch branches or restore working tree files
      push                           Update remote refs along with associated objects
      pull                           Fetch from and integrate with another repository or a local branch
      fetch                          Download objects and refs from another repository
      merge                          Join two or more development histories together
      rebase                         Reapply commits on top of another base tip
      stash                          Stash the changes in a dirty working directory away
      remote                         Manage set of tracked repositories
      tag                            Create, list, delete or verify a tag object signed with GPG
      help [command]                 Display help information

    Any other command is passed straight to git.""")

PASSTHROUGH = (
    "init", "status", "log", "diff", "branch", "checkout", "push", "pull",
    "fetch", "merge", "rebase", "stash", "remote", "tag",
)


def show_usage() -> None:
    print(USAGE)


def passthrough(command: Command) -> int:
    return 0 if execute(command.name, command.args) else 1


def handle_add(command: Command) -> int:
    if not command.args:
        error("Missing file path")
        return 1
    return passthrough(command)


def handle_commit(command: Command) -> int:
    parser = argparse.ArgumentParser(prog="gg commit", add_help=False, exit_on_error=False)
    parser.add_argument("-m", "--message", default="")
    try:
        args, extra = parser.parse_known_args(list(command.args))
    except argparse.ArgumentError:
        args, extra = argparse.Namespace(message=""), []

    if not args.message:
        error("Commit message is required")
        print("Usage: gg commit -m <message>")
        return 1
    return 0 if execute("commit", ["-m", args.message, *extra]) else 1


def handle_last(command: Command) -> int:
    try:
        last = get_last_commit()
    except GitError as e:
        error(str(e))
        return 1
    if last is None:
        print("No commits found in the repository.")
        return 0
    print()
    heading("Last Commit Information:")
    print(last.describe())
    return 0


def handle_help(command: Command) -> int:
    if command.args:
        return 0 if execute("help", command.args[:1]) else 1
    show_usage()
    return 0


def handle_unknown(command: Command) -> int:
    if execute(command.name, command.args):
        return 0
    error(f"Unknown command '{command.name}'")
    print("Run 'gg help' for usage.")
    return 1


HANDLERS = {name: passthrough for name in PASSTHROUGH}
HANDLERS.update({
    "add": handle_add,
    "commit": handle_commit,
    "autocommit": lambda command: handle_autocommit(),
    "ac": lambda command: handle_autocommit(),
    "autocommit-per-file": lambda command: handle_autocommit_per_file(),
    "acpf": lambda command: handle_autocommit_per_file(),
    "config": lambda command: handle_config(command.args),
    "last": handle_last,
    "help": handle_help,
})


def dispatch(command: Command) -> int:
    """Run *command* and return the process exit code."""
    handler = HANDLERS.get(command.name, handle_unknown)
    return handler(command)
