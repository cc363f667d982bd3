"""Test suite for thor.

Test Structure:
- unit/: Unit tests for individual components
  - colour/: codec, colour sketches, the store and its concurrent builder
  - hammer/: OTU table parsing, top-N reduction and image rendering
  - draw/: canvas rows, padding and PNG output
- fixtures/: Sample OTU tables and sketches
- conftest.py: Shared fixtures and test configuration
"""
