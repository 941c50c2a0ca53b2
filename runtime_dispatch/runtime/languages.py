"""Language tables for both backends."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SandboxLanguage:
    """How the local sandbox runs one language."""

    file_name: str
    command: str
    args: tuple[str, ...]
    toolchain: dict[str, str] = field(default_factory=dict)  # npm deps installed before running


# Languages with a native toolchain inside the local sandbox
SANDBOX_LANGUAGES: dict[str, SandboxLanguage] = {
    "javascript": SandboxLanguage("index.js", "node", ("index.js",)),
    "node": SandboxLanguage("index.js", "node", ("index.js",)),
    "typescript": SandboxLanguage(
        "index.ts",
        "npx",
        ("tsx", "index.ts"),
        toolchain={"typescript": "^5.0.0", "tsx": "^4.7.0"},
    ),
}

LOCAL_SANDBOX_LANGUAGES = frozenset(SANDBOX_LANGUAGES)

# Judge0 CE language ids
JUDGE0_LANGUAGE_IDS: dict[str, int] = {
    "c": 50,
    "cpp": 54,
    "java": 62,
    "python": 71,
    "php": 68,
    "ruby": 72,
    "go": 57,
    "rust": 73,
    "kotlin": 78,
    "swift": 83,
    "typescript": 74,
    "javascript": 63,
}
