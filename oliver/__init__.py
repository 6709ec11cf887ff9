"""Review queue and recommendation client for the Oliver FSRS backend."""

__version__ = "0.1.0"
