"""Hevy CLI - command-line access to the Hevy workout tracking API."""

__version__ = "0.1.0"

from hevy_cli.client import HevyClient, get_count, get_list
from hevy_cli.exceptions import HevyAPIError, HevyCLIError, MissingAPIKeyError
from hevy_cli.models import (
    Config,
    Credential,
    CredentialSource,
    ExerciseView,
    RoutineView,
    WorkoutView,
)

__all__ = [
    "HevyClient",
    "HevyAPIError",
    "HevyCLIError",
    "MissingAPIKeyError",
    "Config",
    "Credential",
    "CredentialSource",
    "ExerciseView",
    "RoutineView",
    "WorkoutView",
    "get_count",
    "get_list",
]
