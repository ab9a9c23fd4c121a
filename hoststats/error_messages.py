"""
Centralized operator-facing message templates for hoststats.

Usage:
    from hoststats.error_messages import format_error

    msg = format_error('CONFIG_FILE_NOT_FOUND', path='config.json')
"""

from typing import Dict, Optional


ERROR_MESSAGES: Dict[str, str] = {
    'CONFIG_FILE_NOT_FOUND': (
        "Configuration file not found: {path}\n"
        "hoststats reads ./config.json unless told otherwise; "
        "point it at your endpoint list with --config-file <path>.\n"
        "No endpoint has been contacted."
    ),

    'CONFIG_INVALID': (
        "Configuration file {path} is invalid.\n"
        "{error}\n"
        "No endpoint has been contacted."
    ),

    'ENDPOINTS_FAILED': (
        "{failed} of {total} endpoints did not return results:\n"
        "{endpoints}\n"
        "Rows from the remaining endpoints were written to {path}."
    ),

    'SINK_WRITE_FAILED': (
        "Could not write results to {path}.\n"
        "{error}\n"
        "The file may contain the rows of endpoints merged before the failure."
    ),

    'INTERRUPTED': (
        "Collection interrupted.\n"
        "Endpoints that had not started were skipped; open sessions were released."
    ),

    'INTERNAL_ERROR': (
        "An internal error occurred: {error}\n"
        "Run with --debug for the full stack trace."
    ),
}


def format_error(error_key: str, **kwargs) -> str:
    """
    Render the template stored under error_key.

    Unknown keys and missing parameters still produce a readable message
    so that reporting an error never raises.

    Args:
        error_key: Name of the template in ERROR_MESSAGES.
        **kwargs: Values for the template placeholders.

    Returns:
        The rendered message.

    Example:
        >>> format_error('CONFIG_FILE_NOT_FOUND', path='config.json')
        'Configuration file not found: config.json...'
    """
    template = ERROR_MESSAGES.get(error_key)
    if template is None:
        return f"Unknown error: {error_key}\nContext: {kwargs}"

    try:
        return template.format(**kwargs)
    except KeyError as e:
        return f"{template}\n(Missing format parameter: {e})"


def get_error_template(error_key: str) -> Optional[str]:
    """Return the raw template for a key, or None if unknown."""
    return ERROR_MESSAGES.get(error_key)


def list_error_keys() -> list:
    """Return all available error message keys."""
    return list(ERROR_MESSAGES.keys())
