"""
Template variable substitution.

WHAT: Replaces ``{{name}}`` markers in stored template strings.

WHY: Receipt/invoice layouts and notification emails are user-editable HTML
stored in the database. Substitution is deliberately literal: a marker is
replaced only when its exact name is supplied; anything else, including
block syntax such as ``{{#each items}}``, passes through untouched.

HOW: One left-to-right regex pass over the template, so substituted values
are never themselves expanded. Values must be strings; callers format
amounts and dates with ``format_amount`` / ``format_date`` first.
"""

import re
from datetime import date, datetime
from typing import Any, List, Mapping, Optional

# Marker name as written between braces, exactly; no whitespace trimming
MARKER_PATTERN = re.compile(r"\{\{([^{}]+?)\}\}")

# Names usable as plain variables (excludes block directives like #each, /each)
VARIABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


def render(template: str, variables: Mapping[str, str]) -> str:
    """
    Substitute every ``{{k}}`` for each key ``k`` in ``variables``.

    Replacement is global and literal, and values are inserted as given:
    callers format them to strings first. Markers whose name is not a key of
    ``variables`` are left byte-identical.

    Args:
        template: Template text
        variables: Marker name to replacement string

    Returns:
        Rendered text

    Example:
        >>> render("Hi {{name}}, total {{total}}", {"name": "Sam"})
        'Hi Sam, total {{total}}'
    """
    if not template or not variables:
        return template

    # Longest markers first so one marker never shadows another that contains it
    markers = sorted((f"{{{{{name}}}}}" for name in variables), key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(marker) for marker in markers))

    def _replace(match: "re.Match[str]") -> str:
        return variables[match.group(0)[2:-2]]

    return pattern.sub(_replace, template)


def extract_variables(template: Optional[str]) -> List[str]:
    """
    Variable names referenced by a template, in first-seen order.

    Block directives (``{{#each x}}``, ``{{/each}}``) are not variables and
    are excluded.
    """
    if not template:
        return []
    seen: List[str] = []
    for name in MARKER_PATTERN.findall(template):
        if VARIABLE_NAME_PATTERN.match(name) and name not in seen:
            seen.append(name)
    return seen


def find_unresolved(template: Optional[str], variables: Mapping[str, Any]) -> List[str]:
    """Variables the template references that ``variables`` does not supply."""
    return [name for name in extract_variables(template) if name not in variables]


def format_amount(value: Any) -> str:
    """
    Format a number with thousands separators and two decimals.

    Example:
        >>> format_amount(1234.5)
        '1,234.50'
    """
    try:
        return f"{float(value or 0):,.2f}"
    except (TypeError, ValueError):
        return str(value)


def format_date(value: Any) -> str:
    """
    Format a date for display, e.g. ``January 05, 2026``.

    ISO strings are parsed first; unparseable values are returned as given.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, (datetime, date)):
        return value.strftime("%B %d, %Y")
    return str(value)
