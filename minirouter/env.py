import os
from dataclasses import dataclass

from minirouter.utils import truthy


def get_env() -> str:
    return os.environ.get("APP_ENV", "production")


def is_development() -> bool:
    """
    Returns a value indicating whether the application is running for local development.
    This method checks if an `APP_ENV` environment variable is set and its lowercase
    value is either "local", "dev", or "development".
    """
    return get_env().lower() in {"local", "dev", "development"}


def is_production() -> bool:
    """
    Returns a value indicating whether the application is running for the production
    environment (default is true).
    """
    return get_env().lower() in {"prod", "production"}


@dataclass(init=False, frozen=True)
class EnvironmentSettings:
    env: str
    show_error_details: bool

    def __init__(self) -> None:
        object.__setattr__(self, "env", get_env())
        object.__setattr__(
            self,
            "show_error_details",
            truthy(os.environ.get("APP_SHOW_ERROR_DETAILS", "")),
        )
