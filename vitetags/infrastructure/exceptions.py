"""
Custom exception classes for the Vite tag engine.

Provides structured error handling with user-friendly messages. Errors are
raised only for the primary target of a call (the manifest, the hot file, a
requested entry); incidental dependencies that cannot be resolved are skipped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ViteError(Exception):
    """Base exception for all vitetags errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        """Provide a user-friendly version of the error message."""
        return "Frontend assets could not be resolved."

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ManifestError(ViteError):
    """Raised when the build manifest cannot be used."""

    def __init__(self, message: str, path: str | Path, details: dict[str, Any] | None = None):
        self.path = str(path)
        super().__init__(
            message=message,
            details=details or {"path": self.path},
        )

    def _get_default_user_message(self) -> str:
        return "The frontend build manifest is unavailable. Run the frontend build first."


class ManifestNotFoundError(ManifestError):
    """Raised when the manifest file does not exist."""

    def __init__(self, path: str | Path):
        super().__init__(message=f"Vite manifest not found at: {path}", path=path)


class ManifestReadError(ManifestError):
    """Raised when the manifest file exists but cannot be read."""

    def __init__(self, path: str | Path, reason: str):
        self.reason = reason
        super().__init__(
            message=f"Unable to read Vite manifest at {path}: {reason}",
            path=path,
            details={"path": str(path), "reason": reason},
        )


class ManifestParseError(ManifestError):
    """Raised when the manifest file is not a JSON object."""

    def __init__(self, path: str | Path, reason: str):
        self.reason = reason
        super().__init__(
            message=f"Unable to parse Vite manifest at {path}: {reason}",
            path=path,
            details={"path": str(path), "reason": reason},
        )


class ChunkNotFoundError(ViteError):
    """Raised when a requested entry is absent from the manifest."""

    def __init__(self, key: str, manifest_path: str | Path | None = None):
        self.key = key
        self.manifest_path = str(manifest_path) if manifest_path is not None else None
        super().__init__(
            message=f"Unable to locate file in Vite manifest: {key}",
            details={"key": key, "manifest_path": self.manifest_path},
        )

    def _get_default_user_message(self) -> str:
        return f"The asset '{self.key}' is not part of the frontend build."


class HotFileReadError(ViteError):
    """Raised when the hot file exists but its content cannot be read."""

    def __init__(self, path: str | Path, reason: str | None = None):
        self.path = str(path)
        super().__init__(
            message=f"Unable to read Vite hot file at {path}"
            + (f": {reason}" if reason else ""),
            details={"path": self.path, "reason": reason},
            user_message="The Vite development server address could not be read.",
        )


class AssetFileNotFoundError(ViteError):
    """Raised when a built asset listed in the manifest is missing on disk."""

    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(
            message=f"Unable to locate file from Vite manifest: {path}",
            details={"path": self.path},
        )


class ConfigurationError(ViteError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            details=details or {"config_key": config_key},
            user_message="Configuration error. Please check your settings.",
        )


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Create a user-friendly error message from any exception.

    Args:
        error: The exception to convert

    Returns:
        User-friendly error message

    Example:
        >>> error = ChunkNotFoundError("main.js")
        >>> create_user_friendly_error_message(error)
        "The asset 'main.js' is not part of the frontend build."
    """
    if isinstance(error, ViteError):
        return error.user_message

    error_type = type(error).__name__
    messages = {
        "FileNotFoundError": "A required file is missing. Please check your build output.",
        "PermissionError": "A required file could not be read. Please check file permissions.",
        "ValueError": "Invalid input provided. Please check your data and try again.",
    }
    return messages.get(
        error_type, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create structured error details for logging.

    Args:
        error: The exception to log
        context: Additional context information

    Returns:
        Dictionary with structured error details
    """
    details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, ViteError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
