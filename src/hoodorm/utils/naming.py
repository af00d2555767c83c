"""
Identifier case conversion between Python classes and SQL names.
"""

import re

# lower->Upper transitions and the last capital of an acronym ("HTTPServer")
_WORD_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def camel_to_snake(name: str) -> str:
    """``SampleModel`` -> ``sample_model``; acronyms stay whole (``UserID`` -> ``user_id``)."""
    return _WORD_BOUNDARY_RE.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    """``add_users`` -> ``AddUsers``, used for generated class names."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)
