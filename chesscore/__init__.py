"""Chess position representation, hashing, move making and exchange evaluation."""

__version__ = "0.1.0"
__all__ = ["types", "psqt", "board", "state", "basepos", "position", "search"]