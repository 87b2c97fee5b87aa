"""User-facing hints for configuration validation errors."""

from typing import Final


ERROR_HINTS: Final[dict[str, str]] = {
    "missing": "This field is required. Please add it to your configuration.",
    "int_type": "This field must be an integer (whole number).",
    "float_type": "This field must be a number.",
    "float_parsing": "This field must be a number.",
    "string_type": "This field must be a text string.",
    "list_type": "This field must be a list.",
    "dict_type": "This field must be a mapping.",
    "greater_than": "The value is too small. It must be strictly positive.",
    "greater_than_equal": "The value is too small. Check the minimum allowed.",
    "less_than_equal": "The value is too large. Check the maximum allowed.",
    "too_short": "The list is empty. Provide at least one entry.",
    "extra_forbidden": "Unknown field. Check for typos in the key name.",
    "value_error": "The value is inconsistent with related fields.",
    "unknown_category": "Use one of the configured category names.",
    "unknown_period": "Use one of: day, week, month, all (or a configured period).",
    "file_not_found": "The file does not exist. Check the file path.",
    "yaml_parse_error": "Invalid YAML syntax. Check indentation and quoting.",
}

FIELD_HINTS: Final[dict[str, str]] = {
    "weights": "lexical + model + recency must add up to 1.0 (e.g. 0.35/0.45/0.2).",
    "half_life_days": "Must be a positive number of days (e.g. 3 or 0.5).",
    "min_relevance": "Must be an integer between 0 and 10.",
    "max_items": "Must be an integer of at least 1.",
    "query_terms": "Give a list of terms or a space-separated query string.",
    "max_per_source": "Must be an integer of at least 1.",
}


def get_error_hint(error_type: str, field_name: str | None = None) -> str:
    """Get a user-friendly hint for a validation error.

    Args:
        error_type: Pydantic error type (e.g. 'missing').
        field_name: Dotted error location, if known.

    Returns:
        Hint text.
    """
    if field_name:
        for part in reversed(field_name.split(".")):
            if part in FIELD_HINTS:
                return FIELD_HINTS[part]

    return ERROR_HINTS.get(
        error_type, "Check the configuration documentation for valid values."
    )


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    """Format a validation error with an optional hint line."""
    base = f"{location}: {message}"
    if include_hint:
        hint = get_error_hint(error_type, location)
        return f"{base}\n    Hint: {hint}"
    return base
