"""
Letters module - incoming/outgoing letter storage.
"""

from arsana.letters.models import Letter, LetterCreate, LetterKind
from arsana.letters.repository import LetterRepository

__all__ = [
    "Letter",
    "LetterCreate",
    "LetterKind",
    "LetterRepository",
]
