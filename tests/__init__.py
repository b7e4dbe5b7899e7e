"""
LLM Readiness Tests Package
===========================
Test suite for the analyzers, the engine and its collaborators.

Run all tests: python3 -m pytest tests/ -v
Run specific: python3 -m pytest tests/test_engine.py -v
"""

__version__ = "1.0.0"
