"""
Test suite for floatshadow

Contains:
- tests/unit/          : Unit tests for math, evaluator, contracts and session modules
"""
