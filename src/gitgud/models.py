from dataclasses import dataclass, field


@dataclass(frozen=True)
class Command:
    """A parsed `gg` invocation: subcommand name plus the raw arguments after it."""
    name: str
    args: tuple = field(default_factory=tuple)


@dataclass
class ChangedFile:
    path: str
    status: str


@dataclass
class LastCommit:
    hash: str
    author: str
    date: str
    subject: str

    def describe(self) -> str:
        return f"Last commit: {self.hash} by {self.author} on {self.date} - {self.subject}"


@dataclass(frozen=True)
class CommitRules:
    rules: str
    source: str
    path: str | None = None

    @property
    def location(self) -> str:
        return self.path or "built-in"
