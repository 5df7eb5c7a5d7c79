import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import dotenv
import openai
from openai import OpenAI

from .ui import styled, ask, error, warning, BOLD, DIM, GREEN, RED

LOG = logging.getLogger("gitgud")

API_KEY_ENV = "OPENAI_API_KEY"
CONFIG_DIR_NAME = ".gg"
CONFIG_FILE_NAME = "config.json"
CONFIG_KEY_FIELD = "openai_api_key"
DOTENV_NAME = ".env"
DEFAULT_MODEL = "gpt-4.1-nano"
PROBE_TIMEOUT = 5.0


class ConfigError(RuntimeError):
    """No usable API key could be obtained."""


@dataclass
class Settings:
    model: str = DEFAULT_MODEL
    probe_model: str = DEFAULT_MODEL
    base_url: str | None = None


def load_config() -> Settings:
    model = os.getenv("GG_MODEL", DEFAULT_MODEL)
    return Settings(
        model=model,
        probe_model=os.getenv("GG_PROBE_MODEL", model),
        base_url=os.getenv("OPENAI_BASE_URL") or None,
    )


def setup_logging(verbose: bool = False) -> None:
    """Enable debug logging when GG_DEBUG=1 or --verbose."""
    level = logging.DEBUG if (verbose or os.getenv("GG_DEBUG")) else logging.WARNING
    LOG.setLevel(level)
    if level == logging.DEBUG and not LOG.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setLevel(logging.DEBUG)
        LOG.addHandler(h)


# ──────────────────────────────────────────────
# Key locations
# ──────────────────────────────────────────────
def home_config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


def install_dir() -> Path:
    """Directory holding the running `gg` executable (packaged defaults)."""
    return Path(sys.argv[0]).resolve().parent


def read_dotenv_key(path: Path) -> str | None:
    if not path.is_file():
        return None
    return dotenv.dotenv_values(path).get(API_KEY_ENV) or None


def read_json_key(directory: Path) -> str | None:
    path = directory / CONFIG_FILE_NAME
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        LOG.debug("skipping %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None
    return data.get(CONFIG_KEY_FIELD) or None


def key_sources(cwd: Path | None = None) -> list[tuple]:
    """(label, loader) pairs in lookup priority order."""
    cwd = Path(cwd) if cwd else Path.cwd()
    exe_dir = install_dir()
    return [
        (f"Environment variable {API_KEY_ENV}", lambda: os.getenv(API_KEY_ENV) or None),
        ("Local .env file", lambda: read_dotenv_key(cwd / DOTENV_NAME)),
        (f"Home directory config (~/{CONFIG_DIR_NAME}/{CONFIG_FILE_NAME})",
         lambda: read_json_key(home_config_dir())),
        ("Executable directory .env", lambda: read_dotenv_key(exe_dir / DOTENV_NAME)),
        (f"Executable directory config ({CONFIG_FILE_NAME})", lambda: read_json_key(exe_dir)),
    ]


# ──────────────────────────────────────────────
# Validation & resolution
# ──────────────────────────────────────────────
def validate_api_key(key: str, settings: Settings | None = None) -> tuple[bool, str]:
    """Probe the API with a tiny completion. Returns (valid, reason)."""
    if not key:
        return False, "API key is empty"
    settings = settings or load_config()
    client = OpenAI(api_key=key, base_url=settings.base_url,
                    timeout=PROBE_TIMEOUT, max_retries=0)
    try:
        resp = client.chat.completions.create(
            model=settings.probe_model,
            max_tokens=5,
            messages=[{"role": "user", "content": "Test"}],
        )
    except openai.AuthenticationError:
        return False, "invalid API key"
    except openai.OpenAIError as e:
        return False, f"could not validate: {e}"

    if resp.choices:
        return True, ""
    return False, "unexpected response from API"


def resolve_api_key(cwd: Path | None = None, validate=None) -> str:
    """Return the first valid API key from the configured sources.

    The interactive setup only runs when no source holds a key at all. If
    keys were found but every one was rejected, ConfigError is raised so the
    user can fix them with `gg config reset`.
    """
    validate = validate or validate_api_key
    rejected = set()
    for label, load in key_sources(cwd):
        key = load()
        if not key or key in rejected:
            continue
        valid, reason = validate(key)
        if valid:
            LOG.debug("using API key from %s", label)
            return key
        warning(f"API key from {label} is invalid: {reason}")
        rejected.add(key)

    if rejected:
        raise ConfigError("No valid OpenAI API key found.")

    print("No OpenAI API key found.")
    print("You can run 'gg config reset' at any time to change it later.")
    return setup_interactively(cwd)


# ──────────────────────────────────────────────
# Persistence
# ──────────────────────────────────────────────
def save_home_config(key: str, directory: Path | None = None) -> Path:
    directory = directory or home_config_dir()
    directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    path = directory / CONFIG_FILE_NAME
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump({CONFIG_KEY_FIELD: key}, f, indent=2)
    os.chmod(path, 0o600)
    return path


def save_local_dotenv(key: str, path: Path | None = None) -> Path:
    path = path or Path.cwd() / DOTENV_NAME
    path.touch(mode=0o600, exist_ok=True)
    dotenv.set_key(str(path), API_KEY_ENV, key, quote_mode="never")
    os.chmod(path, 0o600)
    return path


def setup_interactively(cwd: Path | None = None) -> str:
    key = ask("Please enter your OpenAI API key: ")
    if not key:
        raise ConfigError("API key cannot be empty")

    print("\nWhere would you like to save your API key?")
    print("  1. User home directory (recommended)")
    print("  2. Current directory (.env)")
    print("  3. Don't save (use only for this session)")
    choice = ask("Select [1/2/3]: ")

    try:
        if choice == "1":
            path = save_home_config(key)
            print(styled(f"API key saved to {path}", GREEN))
        elif choice == "2":
            cwd = Path(cwd) if cwd else Path.cwd()
            path = save_local_dotenv(key, cwd / DOTENV_NAME)
            print(styled(f"API key saved to {path}", GREEN))
        else:
            print("API key will be used for this session only.")
    except OSError as e:
        error(f"could not save API key: {e}")
    return key


# ──────────────────────────────────────────────
# `gg config`
# ──────────────────────────────────────────────
def mask_api_key(key: str) -> str:
    if len(key) < 8:
        return "****"
    return key[:4] + "..." + key[-4:]


def show_config_status(cwd: Path | None = None, validate=None) -> None:
    validate = validate or validate_api_key
    print(styled("Current Configuration:", BOLD))
    for label, load in key_sources(cwd):
        key = load()
        if not key:
            print(f"- {label}: {styled('not set', DIM)}")
            continue
        valid, _ = validate(key)
        status = styled("valid", GREEN) if valid else styled("invalid", RED)
        print(f"- {label}: {mask_api_key(key)} ({status})")
    print("\nYou can reset your configuration by running 'gg config reset'")


def reset_config(cwd: Path | None = None) -> int:
    print("Resetting your OpenAI API configuration...")
    try:
        setup_interactively(cwd)
    except ConfigError as e:
        error(str(e))
        return 1
    print(styled("Configuration updated successfully!", GREEN))
    return 0


def handle_config(args=()) -> int:
    if not args:
        show_config_status()
        return 0
    if args[0] == "reset":
        return reset_config()

    print(f"Unknown config command '{args[0]}'. Available commands:")
    print("  gg config           Show current configuration")
    print("  gg config reset     Reset and update your OpenAI API key")
    return 1
