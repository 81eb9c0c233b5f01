"""
Code and plan validation against the fixed component vocabulary.

This is a conservative pattern scan, not a parser. It can misfire on
comparisons such as ``i<count`` or generic annotations like
``useState<string>``; both read as a lowercase tag and are rejected.
Approved component names are PascalCase and matched case-sensitively, so
``<Button`` never collides with the forbidden ``<button``. The import rule
matches the keyword anywhere in the code, so lowercase prose such as
``label="import data"`` is rejected too.
"""

import re

from returns.result import Failure, Result, Success

from .models import PlanComponent, UIPlan, ValidationResult
from .registry import ALLOWED_COMPONENTS

LOWERCASE_TAG = re.compile(r"<([a-z][a-zA-Z0-9-]*)\b")
STYLE_ATTR = re.compile(r"\bstyle\s*=", re.IGNORECASE)
CLASS_ATTR = re.compile(r"\bclass(?:Name)?\s*=", re.IGNORECASE)
CLICK_HANDLER = re.compile(r"\bonclick\s*=", re.IGNORECASE)
IMPORT_STMT = re.compile(r"\bimport(?:\s+|\s*\()|\brequire\s*\(")
ABSOLUTE_URL = re.compile(r"https?://", re.IGNORECASE)
TERMINAL_RENDER = re.compile(r"\brender\s*\([^;]*\)\s*;?\s*$")

# Rule name -> (pattern, message); order is the order errors are reported in
RULES: dict[str, tuple[re.Pattern[str], str]] = {
    "style": (STYLE_ATTR, "style attribute is forbidden"),
    "class": (CLASS_ATTR, "className/class attribute is forbidden"),
    "click_handler": (CLICK_HANDLER, "Native click handlers (onClick) are forbidden"),
    "import": (IMPORT_STMT, "Import statements are not allowed"),
    "url": (ABSOLUTE_URL, "External URLs/CDN links are not allowed"),
}


def find_violations(code: str) -> dict[str, str]:
    """
    Scan code and map each violated rule to its error message.

    Args:
        code: Generated source

    Returns:
        Ordered mapping of rule name to human-readable error
    """
    if not code or not code.strip():
        return {"empty": "Empty code output"}

    violations: dict[str, str] = {}

    tags = []
    for match in LOWERCASE_TAG.finditer(code):
        name = match.group(1)
        if name not in ALLOWED_COMPONENTS and name not in tags:
            tags.append(name)
    if tags:
        found = ", ".join(f"<{t}>" for t in tags)
        violations["html_tag"] = f"Forbidden HTML tag(s) found: {found}. Only approved components may be used."

    for rule, (pattern, message) in RULES.items():
        if pattern.search(code):
            violations[rule] = message

    if not TERMINAL_RENDER.search(code):
        violations["render"] = "Missing 'render(...)' call at the end"

    return violations


def validate_code(code: str) -> ValidationResult:
    """Validate generated code; one error per violated rule category."""
    return ValidationResult.from_errors(list(find_violations(code).values()))


def check_code(code: str) -> Result[str, ValidationResult]:
    """Result-pattern version of validate_code."""
    result = validate_code(code)
    if result.valid:
        return Success(code)
    return Failure(result)


def _walk_components(components: list[PlanComponent], errors: list[str]) -> None:
    for component in components:
        if component.type not in ALLOWED_COMPONENTS:
            errors.append(f'Invalid component: "{component.type}" is not in the whitelist')
        if component.children:
            _walk_components(component.children, errors)


def validate_plan(plan: UIPlan) -> ValidationResult:
    """Check every planned component type and change component against the vocabulary."""
    errors: list[str] = []

    if plan.components:
        _walk_components(plan.components, errors)

    if plan.changes:
        for change in plan.changes:
            if change.component and change.component not in ALLOWED_COMPONENTS:
                errors.append(f'Invalid component in change: "{change.component}" is not in the whitelist')

    return ValidationResult.from_errors(errors)
