import questionary

# ──────────────────────────────────────────────
# ANSI helpers
# ──────────────────────────────────────────────
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
RESET = "\033[0m"

PROCEED, SELECT_ALL, EXIT = 0, 1, 2
MENU_ACTIONS = (
    "✅ Proceed with selected files",
    "📄 Select all remaining files",
    "❌ Exit",
)


class SelectionAborted(Exception):
    """The user left the file selector without choosing to proceed."""


def styled(text: str, *codes: str) -> str:
    return "".join(codes) + text + RESET


def error(message: str) -> None:
    print(styled("Error: ", RED, BOLD) + message)


def warning(message: str) -> None:
    print(styled("Warning: ", YELLOW, BOLD) + message)


def heading(title: str) -> None:
    print(styled(title, BOLD))
    print("=" * len(title))


def ask(prompt: str) -> str:
    """Read one line from stdin; end of input counts as an empty answer."""
    try:
        return input(prompt).strip()
    except EOFError:
        return ""


def confirm(prompt: str) -> bool:
    return ask(prompt).lower() in ("y", "yes")


# ──────────────────────────────────────────────
# File selection
# ──────────────────────────────────────────────
def arrow_choice(message: str, options: list[str]) -> int | None:
    """Arrow-key menu; returns the chosen index, or None on Ctrl-C."""
    choices = [questionary.Choice(title=opt, value=i) for i, opt in enumerate(options)]
    return questionary.select(message, choices=choices).ask()


def select_files(files: list[str], choose=None) -> list[str]:
    """Let the user pick files one at a time until they proceed.

    *choose* is called as ``choose(message, options)`` and must return the
    index of the picked option. The first three options are always
    proceed / select all remaining / exit, followed by one entry per file
    that has not been picked yet.

    Raises SelectionAborted when the user exits.
    """
    choose = choose or arrow_choice
    selected: list[str] = []
    remaining = list(dict.fromkeys(files))

    print(styled("=== Interactive File Selection ===", BOLD))
    print("Pick files one by one, then proceed with your selection.")
    print()

    while remaining:
        print(f"Files selected so far: {len(selected)}")
        for f in selected:
            print(f"  ✅ {f}")
        print(f"Remaining files: {len(remaining)}")

        options = list(MENU_ACTIONS) + [f"📄 {f}" for f in remaining]
        index = choose("Choose an action", options)

        if index is None or index == EXIT:
            raise SelectionAborted()
        if index == PROCEED:
            return selected
        if index == SELECT_ALL:
            return selected + remaining

        pos = index - len(MENU_ACTIONS)
        if not 0 <= pos < len(remaining):
            raise ValueError(f"menu index {index} is out of range")
        picked = remaining.pop(pos)
        selected.append(picked)
        print(styled(f"\n✅ Added: {picked}\n", GREEN))

    return selected
