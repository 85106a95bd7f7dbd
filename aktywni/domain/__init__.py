"""Domain-level policies and business rules.

Credential encodings, their verification and the reset-token lifetime live
here, independent from the services and repositories that apply them.
"""
