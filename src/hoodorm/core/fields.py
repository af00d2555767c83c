"""
Column declarations for hoodorm structures.

Structures are plain dataclasses. Per-column metadata is attached through
:func:`column`, :func:`embed` and :func:`index`, which wrap
:func:`dataclasses.field` and store a spec under ``METADATA_KEY``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import ModelConfigurationError

METADATA_KEY = "hoodorm"

Bounds = tuple[Optional[float], Optional[float]]


@dataclass(frozen=True)
class ColumnSpec:
    """
    Declared column attributes of a single dataclass field.
    """

    primary_key: bool = False
    not_null: bool = False
    db_default: str = ""
    size: int = 0
    auto_increment: Optional[bool] = None
    skip: bool = False
    embedded: bool = False
    length: Optional[Bounds] = None
    range: Optional[Bounds] = None
    presence: bool = False


@dataclass(frozen=True)
class IndexSpec:
    columns: tuple[str, ...]
    unique: bool = False


def _check_bounds(name: str, bounds: Optional[Bounds]) -> Optional[Bounds]:
    if bounds is None:
        return None
    try:
        low, high = bounds
    except (TypeError, ValueError) as exc:
        raise ModelConfigurationError(f"{name} must be a (min, max) pair") from exc
    if low is None and high is None:
        raise ModelConfigurationError(f"{name} needs at least one bound")
    if low is not None and high is not None and low > high:
        raise ModelConfigurationError(f"{name} minimum {low} exceeds maximum {high}")
    return (low, high)


def column(
    default: Any = dataclasses.MISSING,
    *,
    default_factory: Callable[[], Any] | Any = dataclasses.MISSING,
    primary_key: bool = False,
    not_null: bool = False,
    db_default: str = "",
    size: int = 0,
    auto_increment: Optional[bool] = None,
    skip: bool = False,
    length: Optional[Bounds] = None,
    range: Optional[Bounds] = None,
    presence: bool = False,
) -> Any:
    """
    Declare a column on a dataclass field.

    ``default``/``default_factory`` are the Python defaults; ``db_default`` is a
    raw SQL literal rendered into ``DEFAULT``. ``length`` and ``range`` take
    ``(min, max)`` pairs where either bound may be ``None``.
    """
    spec = ColumnSpec(
        primary_key=primary_key,
        not_null=not_null,
        db_default=db_default,
        size=size,
        auto_increment=auto_increment,
        skip=skip,
        length=_check_bounds("length", length),
        range=_check_bounds("range", range),
        presence=presence,
    )
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={METADATA_KEY: spec},
    )


def embed(cls: type) -> Any:
    """
    Flatten the columns of another dataclass into the enclosing structure.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise ModelConfigurationError(f"embed() expects a dataclass, got {cls!r}")
    return dataclasses.field(
        default_factory=cls,
        metadata={METADATA_KEY: ColumnSpec(embedded=True)},
    )


def index(*columns: str, unique: bool = False) -> Any:
    """
    Declare an index over ``columns``; the attribute name becomes the index name.
    """
    if not columns:
        raise ModelConfigurationError("index() needs at least one column")
    return dataclasses.field(
        default=None,
        init=False,
        repr=False,
        compare=False,
        metadata={METADATA_KEY: IndexSpec(tuple(columns), unique)},
    )


def spec_of(field: dataclasses.Field) -> ColumnSpec | IndexSpec:
    return field.metadata.get(METADATA_KEY) or ColumnSpec()
