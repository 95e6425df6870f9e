"""
inter-ai-protocol — domain layer

File: src/inter_ai_protocol/domain/__init__.py

Purpose
- Document shapes (TaskHandoff, TaskResult and their sections) and task ID generation.

Functional requirements
- Models are serializable in declared field order and never validate on construction.

Non-functional requirements
- Domain layer is free of IO side effects and third-party dependencies.
"""
