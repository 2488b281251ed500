from __future__ import annotations


class RecipeServiceError(Exception):
    pass


class UnauthenticatedError(RecipeServiceError):
    def __init__(self, message: str = "Invalid or expired token."):
        super().__init__(message)


class QuotaExceededError(RecipeServiceError):
    def __init__(self, daily_limit: int, message: str | None = None):
        super().__init__(message or f"You have reached your daily limit of {daily_limit} recipes.")
        self.daily_limit = daily_limit


class InvalidInputError(RecipeServiceError):
    def __init__(self, message: str = "Invalid request body.", details: object | None = None):
        super().__init__(message)
        self.details = details


class RecipeNotFoundError(RecipeServiceError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class RepositoryError(RecipeServiceError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class AccountDeletionError(RecipeServiceError):
    def __init__(self, user_id: str, reason: str):
        super().__init__(f"Failed to delete user: {reason}")
        self.user_id = user_id
        self.reason = reason


class ConfigurationError(RecipeServiceError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Configuration errors: {', '.join(errors)}")
        self.errors = errors
