"""
inter-ai-protocol — integration test package

File: tests/integration/__init__.py

Purpose
- Test package marker; end-to-end tests drive the ``iap`` CLI in-process.
"""
