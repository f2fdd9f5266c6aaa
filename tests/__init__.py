"""Test suite for TransitionKit.

Test Structure:
- unit/: Unit tests for individual components
  - utils/: Duration parsing and frame grid helpers
  - config/: Configuration models and loader
  - logging/: Diagnostic capture
  - host/: In-memory timeline host
  - transitions/: Segmenter, locator, drivers, links, editor
  - cli/: Command-line interface
- integration/: End-to-end edits on the in-memory host
- conftest.py: Shared fixtures
"""
