"""Custom exception hierarchy for tasktree."""


class AppError(Exception):
    """Base exception for app-specific failures."""


class UsageError(ValueError, AppError):
    """Command usage or user-input errors."""


class ValidationError(ValueError, AppError):
    """Task payload validation errors."""


class ConfigError(ValueError, AppError):
    """Settings/configuration validation errors."""


class StorageError(AppError):
    """Snapshot or settings load/save failures."""
