"""
Tests for prompt assembly, diff truncation and the completion call.
"""

import openai
import pytest

from conftest import FakeClient
from gitgud.llm import (
    LLMError, MAX_DIFF_CHARS, TRUNCATION_MARKER,
    build_batch_prompt, build_commit_prompt, generate_commit_message, truncate_diff,
)
from gitgud.models import CommitRules, LastCommit
from gitgud.rules import BUILT_IN


class TestTruncateDiff:

    @pytest.mark.parametrize("size", [0, 1, 50, MAX_DIFF_CHARS - 1, MAX_DIFF_CHARS])
    def test_at_or_under_budget_is_unchanged(self, size):
        diff = "a" * size
        assert truncate_diff(diff) == diff

    @pytest.mark.parametrize("size", [MAX_DIFF_CHARS + 1, MAX_DIFF_CHARS * 3])
    def test_over_budget_is_cut_to_budget_plus_marker(self, size):
        diff = "".join(chr(ord("a") + i % 26) for i in range(size))
        result = truncate_diff(diff)
        assert len(result) == MAX_DIFF_CHARS + len(TRUNCATION_MARKER)
        assert result == diff[:MAX_DIFF_CHARS] + TRUNCATION_MARKER

    def test_custom_limit(self):
        assert truncate_diff("abcdef", limit=3) == "abc" + TRUNCATION_MARKER


class TestPrompts:

    def test_commit_prompt_contains_every_part(self):
        diff = "+" * 50
        last = LastCommit("abc1234", "Sam", "today", "chore: init")
        rules = CommitRules(rules="Use emoji prefixes.", source="project", path="/x/.autocommit.md")

        prompt = build_commit_prompt(diff, "feature/login", last, "fixes the login bug", rules)

        assert f"\n{diff}\n" in prompt
        assert TRUNCATION_MARKER not in prompt
        assert "Current branch: feature/login" in prompt
        assert "Last commit: abc1234 by Sam on today - chore: init" in prompt
        assert "fixes the login bug" in prompt
        assert "Use emoji prefixes." in prompt

    def test_commit_prompt_without_history(self):
        prompt = build_commit_prompt("diff", "main", None, "", BUILT_IN)
        assert "Last commit" not in prompt
        assert "Conventional Commits" in prompt

    def test_commit_prompt_truncates_large_diff(self):
        prompt = build_commit_prompt("x" * (MAX_DIFF_CHARS + 10), "main", None, "", BUILT_IN)
        assert TRUNCATION_MARKER in prompt

    def test_batch_prompt_lists_files(self):
        prompt = build_batch_prompt(["a.py", "b.py"], "--- a.py ---\n+x\n", "dev", "ctx", BUILT_IN)
        assert "these 2 files: a.py, b.py" in prompt
        assert "--- a.py ---" in prompt
        assert "Current branch: dev" in prompt


class TestGenerate:

    def test_returns_trimmed_text(self):
        client = FakeClient(text="\n  feat: add login form  \n")
        assert generate_commit_message(client, "PROMPT", model="m1") == "feat: add login form"

    def test_single_user_message_with_token_budget(self):
        client = FakeClient()
        generate_commit_message(client, "PROMPT", model="m1", max_tokens=99)

        assert len(client.calls) == 1
        call = client.calls[0]
        assert call["model"] == "m1"
        assert call["max_tokens"] == 99
        assert call["messages"] == [{"role": "user", "content": "PROMPT"}]

    def test_default_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("GG_MODEL", "custom-model")
        client = FakeClient()
        generate_commit_message(client, "PROMPT")
        assert client.calls[0]["model"] == "custom-model"

    def test_api_error_is_wrapped(self):
        client = FakeClient(error=openai.OpenAIError("connection refused"))
        with pytest.raises(LLMError, match="connection refused"):
            generate_commit_message(client, "PROMPT", model="m1")

    def test_empty_response(self):
        with pytest.raises(LLMError):
            generate_commit_message(FakeClient(choices=False), "PROMPT", model="m1")
