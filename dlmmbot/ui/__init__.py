"""User interface components for dlmmbot."""

from .menu import MenuEngine
from .prompts import Prompter

__all__ = ["MenuEngine", "Prompter"]
