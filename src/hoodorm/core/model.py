"""
Model derivation: turning dataclass structures into table metadata.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from ..utils import camel_to_snake, snake_to_camel
from .errors import ModelConfigurationError, NotAStructError
from .fields import Bounds, ColumnSpec, IndexSpec, spec_of
from .types import (
    INTEGER_KINDS,
    Index,
    UniqueIndex,
    ValueKind,
    classify,
    is_zero,
    kind_of_type,
    unwrap_optional,
    zero_value,
)


@dataclass
class ModelField:
    """
    One column of a derived model, carrying the value it held at derivation.
    """

    name: str
    value: Any
    kind: Optional[ValueKind]
    annotation: Any = None
    primary_key: bool = False
    not_null: bool = False
    default: str = ""
    size: int = 0
    auto_increment: bool = False
    length: Optional[Bounds] = None
    range: Optional[Bounds] = None
    presence: bool = False
    path: tuple[str, ...] = ()

    def is_zero(self) -> bool:
        return is_zero(self.value)

    def python_type_name(self) -> str:
        annotation = unwrap_optional(self.annotation)
        if isinstance(annotation, type):
            return annotation.__name__
        if isinstance(annotation, str):
            return annotation
        return type(self.value).__name__


@dataclass
class ModelIndex:
    name: str
    columns: tuple[str, ...]
    unique: bool = False


@dataclass
class Model:
    """
    Table metadata derived from a dataclass structure.
    """

    table: str
    fields: list[ModelField] = field(default_factory=list)
    indexes: list[ModelIndex] = field(default_factory=list)
    source: Optional[type] = field(default=None, repr=False, compare=False)

    @property
    def pk(self) -> Optional[ModelField]:
        for model_field in self.fields:
            if model_field.primary_key:
                return model_field
        return None

    def field(self, name: str) -> ModelField:
        for model_field in self.fields:
            if model_field.name == name:
                return model_field
        raise KeyError(f"Unknown column '{name}' on table '{self.table}'")

    def validate(self) -> None:
        from ..validation import validate_model

        validate_model(self)

    def python_declaration(self) -> str:
        """
        Render the model back as dataclass source code.
        """
        lines = ["@dataclass", f"class {snake_to_camel(self.table)}:"]
        for model_field in self.fields:
            lines.append(f"    {model_field.name}: {model_field.python_type_name()} = {_declare(model_field)}")
        for model_index in self.indexes:
            annotation = "UniqueIndex" if model_index.unique else "Index"
            columns = ", ".join(repr(name) for name in model_index.columns)
            lines.append(f"    {model_index.name}: {annotation} = index({columns})")
        if len(lines) == 2:
            lines.append("    pass")
        return "\n".join(lines)


def _declare(model_field: ModelField) -> str:
    zero = repr(zero_value(model_field.kind, model_field.annotation))
    options = []
    if model_field.primary_key and model_field.kind is not ValueKind.ID:
        options.append("primary_key=True")
    if model_field.not_null:
        options.append("not_null=True")
    if model_field.default:
        options.append(f"db_default={model_field.default!r}")
    if model_field.size:
        options.append(f"size={model_field.size}")
    if model_field.auto_increment and not model_field.primary_key:
        options.append("auto_increment=True")
    if model_field.length is not None:
        options.append(f"length={model_field.length!r}")
    if model_field.range is not None:
        options.append(f"range={model_field.range!r}")
    if model_field.presence:
        options.append("presence=True")
    if not options:
        return zero
    return f"column({', '.join([zero, *options])})"


@dataclass(frozen=True)
class ColumnTarget:
    path: tuple[str, ...]
    kind: Optional[ValueKind]
    annotation: Any


def _dataclass_type(target: Any) -> type:
    cls = target if isinstance(target, type) else type(target)
    if not dataclasses.is_dataclass(cls):
        raise NotAStructError(f"Expected a dataclass or dataclass instance, got {target!r}")
    return cls


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {f.name: f.type for f in dataclasses.fields(cls)}


def _declared_value(dc_field: dataclasses.Field, annotation: Any) -> Any:
    if dc_field.default is not dataclasses.MISSING:
        return dc_field.default
    if dc_field.default_factory is not dataclasses.MISSING:
        return dc_field.default_factory()
    return zero_value(kind_of_type(annotation), annotation)


def _is_unique(annotation: Any) -> bool:
    annotation = unwrap_optional(annotation)
    if isinstance(annotation, str):
        return annotation == "UniqueIndex"
    return isinstance(annotation, type) and issubclass(annotation, UniqueIndex)


def _is_index(annotation: Any) -> bool:
    annotation = unwrap_optional(annotation)
    if isinstance(annotation, str):
        return annotation in ("Index", "UniqueIndex")
    return isinstance(annotation, type) and issubclass(annotation, Index)


def table_name(target: Any) -> str:
    """
    Resolve a table name from a string, a dataclass or a dataclass instance.
    """
    if isinstance(target, str):
        return target
    cls = _dataclass_type(target)
    return getattr(cls, "__table__", None) or camel_to_snake(cls.__name__)


def _collect(model: Model, source: Any, cls: type, path: tuple[str, ...]) -> None:
    hints = _type_hints(cls)
    instance = None if isinstance(source, type) else source
    for dc_field in dataclasses.fields(cls):
        spec = spec_of(dc_field)
        annotation = hints.get(dc_field.name, dc_field.type)
        if isinstance(spec, IndexSpec):
            model.indexes.append(
                ModelIndex(dc_field.name, spec.columns, spec.unique or _is_unique(annotation))
            )
            continue
        if _is_index(annotation):
            raise ModelConfigurationError(
                f"Index '{dc_field.name}' on '{cls.__name__}' must be declared with index(...)"
            )
        if spec.skip:
            continue
        if instance is not None:
            value = getattr(instance, dc_field.name)
        else:
            value = _declared_value(dc_field, annotation)
        if spec.embedded:
            embedded = value if value is not None else unwrap_optional(annotation)
            _collect(model, embedded, _dataclass_type(embedded), path + (dc_field.name,))
            continue
        model.fields.append(_model_field(dc_field.name, value, annotation, spec, path))


def _model_field(
    attribute: str, value: Any, annotation: Any, spec: ColumnSpec, path: tuple[str, ...]
) -> ModelField:
    kind = classify(value, annotation)
    primary_key = spec.primary_key or kind is ValueKind.ID
    auto_increment = spec.auto_increment
    if auto_increment is None:
        auto_increment = primary_key and kind in INTEGER_KINDS
    return ModelField(
        name=camel_to_snake(attribute),
        value=value,
        kind=kind,
        annotation=annotation,
        primary_key=primary_key,
        not_null=spec.not_null,
        default=spec.db_default,
        size=spec.size,
        auto_increment=auto_increment,
        length=spec.length,
        range=spec.range,
        presence=spec.presence,
        path=path + (attribute,),
    )


def model_from(target: Any, table: Optional[str] = None) -> Model:
    """
    Derive a :class:`Model` from a dataclass or dataclass instance.

    Instances contribute their current values, classes their declared defaults.
    Embedded structures are flattened, skipped fields omitted and index fields
    collected separately.
    """
    cls = _dataclass_type(target)
    model = Model(table=table or table_name(cls), source=cls)
    _collect(model, target, cls, ())
    primary_keys = [model_field.name for model_field in model.fields if model_field.primary_key]
    if len(primary_keys) > 1:
        raise ModelConfigurationError(
            f"Multiple primary keys defined on '{cls.__name__}': {', '.join(primary_keys)}"
        )
    return model


def column_targets(cls: type) -> Dict[str, ColumnTarget]:
    """
    Map column names to the attribute paths they scan into.
    """
    model = model_from(cls)
    return {
        model_field.name: ColumnTarget(model_field.path, model_field.kind, model_field.annotation)
        for model_field in model.fields
    }


def new_instance(cls: type) -> Any:
    """
    Build an instance of ``cls`` with zero values for fields lacking defaults.
    """
    hints = _type_hints(_dataclass_type(cls))
    kwargs: Dict[str, Any] = {}
    for dc_field in dataclasses.fields(cls):
        if not dc_field.init:
            continue
        if dc_field.default is dataclasses.MISSING and dc_field.default_factory is dataclasses.MISSING:
            annotation = hints.get(dc_field.name, dc_field.type)
            kwargs[dc_field.name] = zero_value(kind_of_type(annotation), annotation)
    return cls(**kwargs)


def get_path(instance: Any, path: tuple[str, ...]) -> Any:
    for attribute in path:
        instance = getattr(instance, attribute)
    return instance


def set_path(instance: Any, path: tuple[str, ...], value: Any) -> None:
    *parents, attribute = path
    setattr(get_path(instance, tuple(parents)), attribute, value)


def iter_lifecycle(instance: Any, prefix: str) -> Iterator[Any]:
    """
    Yield bound zero-argument methods whose names start with ``prefix``.
    """
    for name in sorted(dir(type(instance))):
        if not name.startswith(prefix):
            continue
        method = getattr(instance, name)
        if callable(method):
            yield method
