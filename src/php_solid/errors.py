"""
Exception hierarchy for php_solid.

Every failure the engine can report derives from SolidError. None of them is
fatal to a run: parse failures degrade to "no information" for the file,
unresolvable classes are treated as not-a-subtype, and class load failures
are turned into error entries by the Application.
"""

from __future__ import annotations

from typing import Optional


class SolidError(Exception):
    """Base class for all php_solid errors."""
    pass


class ParseError(SolidError):
    """A PHP source file could not be read or parsed."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class ClassLoadError(SolidError):
    """A class selected for checking could not be loaded."""
    pass


class ClassNotFoundError(ClassLoadError):
    """The class name is not registered in the index."""

    def __init__(self, name: str, reason: Optional[str] = None):
        message = f'Class "{name}" does not exist'
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.name = name


class ConfigError(SolidError):
    """Configuration file missing, unreadable or invalid."""
    pass
