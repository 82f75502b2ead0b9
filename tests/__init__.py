"""Test suite for formguard.

This package contains tests for:
- Schema types (parsing and serialization of forms and questions)
- Question and form validation rules, including draft mode
- Sanitization and its interaction with validation
- Structural payload checks
- Row conversion and the intake pipeline
"""
