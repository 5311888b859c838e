"""prepdeck: spaced-repetition rehearsal engine for interview preparation."""

__version__ = "1.0.0"
