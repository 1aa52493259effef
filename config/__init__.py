"""Codepad configuration package."""
