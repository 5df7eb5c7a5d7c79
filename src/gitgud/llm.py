import logging
import textwrap

import openai
from openai import OpenAI

from .config import Settings, load_config
from .models import CommitRules, LastCommit

LOG = logging.getLogger("gitgud")

MAX_DIFF_CHARS = 4000
TRUNCATION_MARKER = "\n...(diff truncated due to size)"
MAX_TOKENS = 250

COMMIT_PROMPT = textwrap.dedent("""\
    Generate a commit message for the following git diff:

    {diff}

    Current branch: {branch}
    {last_commit}

    Additional context provided by the user:
    {context}

    The commit message must follow these rules:
    {rules}

    Reply with ONLY the commit message, nothing else.""")

BATCH_PROMPT = textwrap.dedent("""\
    Generate a commit message for changes to these {count} files: {files}

    Combined git diff for these files:
    {diff}

    Current branch: {branch}

    Additional context provided by the user:
    {context}

    The commit message must follow these rules:
    {rules}

    Write one commit message that summarizes the changes across all of these files.
    Reply with ONLY the commit message, nothing else.""")


class LLMError(RuntimeError):
    """The completion request failed or returned nothing usable."""


def get_openai_client(api_key: str, settings: Settings | None = None) -> OpenAI:
    settings = settings or load_config()
    return OpenAI(api_key=api_key, base_url=settings.base_url)


def truncate_diff(diff: str, limit: int = MAX_DIFF_CHARS) -> str:
    if len(diff) <= limit:
        return diff
    return diff[:limit] + TRUNCATION_MARKER


def build_commit_prompt(diff: str, branch: str, last_commit: LastCommit | None,
                        context: str, rules: CommitRules) -> str:
    return COMMIT_PROMPT.format(
        diff=truncate_diff(diff),
        branch=branch,
        last_commit=last_commit.describe() if last_commit else "",
        context=context,
        rules=rules.rules,
    )


def build_batch_prompt(files: list[str], diff: str, branch: str,
                       context: str, rules: CommitRules) -> str:
    return BATCH_PROMPT.format(
        count=len(files),
        files=", ".join(files),
        diff=truncate_diff(diff),
        branch=branch,
        context=context,
        rules=rules.rules,
    )


def generate_commit_message(client, prompt: str, model: str | None = None,
                            max_tokens: int = MAX_TOKENS) -> str:
    """Send *prompt* as a single user message and return the reply text."""
    if model is None:
        model = load_config().model

    LOG.debug("requesting commit message from %s (%d prompt chars)", model, len(prompt))
    try:
        resp = client.chat.completions.create(
            model=model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
    except openai.OpenAIError as e:
        raise LLMError(f"chat completion error: {e}") from e

    if not resp.choices or not resp.choices[0].message.content:
        raise LLMError("the model returned an empty response")
    return resp.choices[0].message.content.strip()
