import argparse
import sys
import textwrap

from . import __version__
from .commands import dispatch, show_usage
from .config import ConfigError, setup_logging
from .git_ops import GitError
from .models import Command
from .ui import error


def split_argv(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split at the first word that is not an option: gg's flags, then the command line."""
    for i, token in enumerate(argv):
        if not token.startswith("-"):
            return argv[:i], argv[i:]
    return argv, []


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    argv = sys.argv[1:] if argv is None else list(argv)
    own, rest = split_argv(argv)
    parser = argparse.ArgumentParser(
        prog="gg",
        usage="%(prog)s [-h] [--version] [-v] [command [args ...]]",
        allow_abbrev=False,
        description="GitGud - a git wrapper with AI-powered commit messages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              %(prog)s status                Run `git status`
              %(prog)s commit -m "message"   Commit staged changes
              %(prog)s ac                    Stage everything and commit with an AI message
              %(prog)s acpf                  Pick files and commit them in batches
              %(prog)s config reset          Set a new OpenAI API key

            Everything after the command is passed on unchanged.
        """),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log git invocations and API calls to stderr")
    args = parser.parse_args(own)
    args.command = rest[0] if rest else None
    args.args = rest[1:]
    return args


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    if not args.command:
        show_usage()
        return 0

    try:
        return dispatch(Command(args.command, tuple(args.args)))
    except (GitError, ConfigError) as e:
        error(str(e))
        return 1
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
