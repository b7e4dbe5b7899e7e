"""
Shared fixtures for the readiness test suite.
"""

import pytest

from config_logging import reset_config


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Each test reads configuration from a clean environment."""
    monkeypatch.delenv('LLMR_ENV', raising=False)
    monkeypatch.setenv('LLMR_LOG_TO_CONSOLE', 'false')
    reset_config()
    yield
    reset_config()


@pytest.fixture
def hello_text() -> str:
    """Smallest meaningful document."""
    return "Hello."


@pytest.fixture
def guide_text() -> str:
    """A short structured how-to guide."""
    return "\n\n".join([
        "# Getting Started with Vector Search",
        "Vector search is a retrieval technique that compares embeddings. "
        "It is useful because semantic similarity matters more than exact keywords.",
        "## How to Build an Index",
        "First, install the library version 2.1 before you begin. "
        "Then follow these steps to create the index and load your documents.",
        "- Split documents into chunks\n- Embed each chunk\n- Store the vectors",
        "## Examples",
        "For example, a support team can index product manuals. "
        "Such an index answers questions about setup and troubleshooting.",
        "## Summary",
        "Vector search improves retrieval when documents are chunked with care.",
    ])


@pytest.fixture
def long_body_text() -> str:
    """One markdown title followed by 500 words of body."""
    sentence = " ".join(["alpha"] * 10) + "."
    return "# Title\n\n" + " ".join([sentence] * 50)
