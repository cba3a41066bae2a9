"""Cookbook assistant: parent-child RAG over recipes and company guides."""

__version__ = "1.0.0"
