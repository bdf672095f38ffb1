"""Centralized exit codes for the funcpack CLI."""


class ExitCodes:
    """Standard exit codes for funcpack CLI commands."""

    SUCCESS = 0

    FUNCTION_FAILED = 1

    NO_FUNCTIONS = 3
