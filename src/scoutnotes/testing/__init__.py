"""Test utilities. Requires the ``fake`` extra (Faker)."""

from scoutnotes.testing.generator import RecordGenerator

__all__ = ["RecordGenerator"]
