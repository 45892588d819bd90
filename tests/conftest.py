"""Shared test fixtures for checkstyle-fixer."""

from pathlib import Path
from typing import Any

import pytest

from checkstyle_fixer.models.diagnostic import Diagnostic


class FakeGenerationService:
    """In-memory GenerationService that replays canned replies.

    Each entry in ``replies`` is either an envelope dict to return or an
    exception instance to raise. Prompts are recorded in call order.
    """

    def __init__(self, replies: list[Any], model: str = "test-model") -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []
        self._model = model

    @property
    def model_name(self) -> str:
        return self._model

    async def generate(self, prompt: str) -> dict[str, Any]:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def sample_build_output() -> str:
    """Gradle output with two diagnostics in one file, one in another, and noise."""
    return "\n".join(
        [
            "> Task :checkstyleMain",
            "[ant:checkstyle] [ERROR] /src/main/java/App.java:3:8: "
            "Unused import - java.util.List. [UnusedImports]",
            "[ant:checkstyle] [ERROR] /src/main/java/Util.java:10:5: "
            "Missing a Javadoc comment. [MissingJavadocMethod]",
            "[ant:checkstyle] [ERROR] /src/main/java/App.java:12:1: "
            "Line is longer than 120 characters (found 131). [LineLength]",
            "[ERROR] Checkstyle rule violations were found. See the report at: build/reports",
            "BUILD FAILED in 4s",
        ]
    )


@pytest.fixture
def sample_diagnostic() -> Diagnostic:
    """A single unused-import diagnostic."""
    return Diagnostic(
        file="/src/main/java/App.java",
        line=3,
        column=8,
        message="Unused import - java.util.List.",
        rule="UnusedImports",
    )


@pytest.fixture
def java_source() -> str:
    """A small Java file with an unused import on line 3."""
    return (
        "package com.example;\n"
        "\n"
        "import java.util.List;\n"
        "\n"
        "public class App {\n"
        "    public static void main(String[] args) {\n"
        '        System.out.println("hi");\n'
        "    }\n"
        "}\n"
    )


@pytest.fixture
def java_file(tmp_path: Path, java_source: str) -> Path:
    """Write ``java_source`` to a temporary App.java."""
    path = tmp_path / "App.java"
    path.write_text(java_source)
    return path


@pytest.fixture
def make_service() -> type[FakeGenerationService]:
    """Return the fake service class so tests can script replies."""
    return FakeGenerationService
