"""Checker components.

- Settings loaded from .env and the YAML policy file
- Structured logging
- A small CLI surface
- The workflow resolver and the pull request check built on it
"""
