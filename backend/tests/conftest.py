"""Pytest fixtures for PageLens tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import pytest

from pagelens.analyzer.walker import TreeWalker
from pagelens.config import RecognizerConfig
from pagelens.dom import DOMNode, parse_fragment
from pagelens.recognizer.recognizer import ComponentRecognizer


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test artifacts."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def parse() -> Callable[[str], DOMNode]:
    """Parse a markup fragment into its first element."""
    return parse_fragment


@pytest.fixture
def config() -> RecognizerConfig:
    """Default recognizer configuration."""
    return RecognizerConfig()


@pytest.fixture
def recognizer(config: RecognizerConfig) -> ComponentRecognizer:
    """Recognizer over the built-in pattern registry."""
    return ComponentRecognizer(config=config)


@pytest.fixture
def walker(recognizer: ComponentRecognizer) -> TreeWalker:
    """Tree walker with the default inline style extractor."""
    return TreeWalker(recognizer=recognizer)


@pytest.fixture
def landing_page() -> str:
    """Small landing page exercising layout, form and content patterns."""
    return """
<!DOCTYPE html>
<html>
<head><title>Acme</title></head>
<body>
  <header class="site-header">
    <nav>
      <a href="/">Home</a>
      <a href="/pricing">Pricing</a>
    </nav>
  </header>
  <section class="hero">
    <h1>Ship faster</h1>
    <p>Acme turns your HTML into a typed component tree in milliseconds.</p>
    <button>Get started</button>
  </section>
  <form action="/subscribe">
    <input type="email" name="email" placeholder="you@example.com">
    <button type="submit">Subscribe</button>
  </form>
  <footer>
    <p>&copy; 2024 Acme. All rights reserved.</p>
  </footer>
</body>
</html>
"""
