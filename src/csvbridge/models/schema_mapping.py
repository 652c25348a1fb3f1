"""Canonical schema and column mapping models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

FieldKind = Literal["text", "money", "integer", "boolean", "enum", "list", "period"]


class FieldSpec(BaseModel):
    """One canonical field an import flow expects to populate."""

    model_config = {"frozen": True}

    key: str
    label: str
    required: bool = False


class FieldRule(BaseModel):
    """Per-field cleanup rule applied by the row transformer."""

    model_config = {"frozen": True}

    kind: FieldKind = "text"
    round_to_int: bool = False  # money only
    allowed: tuple[str, ...] = ()  # enum only
    default: Any = None
    true_token: str = "true"  # boolean only


class HeuristicRule(BaseModel):
    """Substring rule proposing a header for a canonical field.

    A lower-cased header matches when it equals one of ``equals`` (if given),
    contains any of ``any_of`` (if given), contains all of ``all_of`` and
    contains none of ``none_of``.
    """

    model_config = {"frozen": True}

    field: str
    any_of: tuple[str, ...] = ()
    all_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()

    def matches(self, header: str) -> bool:
        if not (self.any_of or self.all_of or self.equals):
            return False
        if self.equals and header not in self.equals:
            return False
        if self.any_of and not any(needle in header for needle in self.any_of):
            return False
        if not all(needle in header for needle in self.all_of):
            return False
        return not any(needle in header for needle in self.none_of)


class ImportSchema(BaseModel):
    """Static configuration for one import flow."""

    model_config = {"frozen": True}

    name: str
    fields: tuple[FieldSpec, ...]
    rules: dict[str, FieldRule] = Field(default_factory=dict)
    heuristics: tuple[HeuristicRule, ...] = ()
    primary_fields: tuple[str, ...] = ()
    record_model: type[BaseModel]

    @property
    def keys(self) -> list[str]:
        return [f.key for f in self.fields]

    @property
    def required_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.required]

    def field(self, key: str) -> FieldSpec:
        for spec in self.fields:
            if spec.key == key:
                return spec
        raise KeyError(key)

    def rule_for(self, key: str) -> FieldRule:
        return self.rules.get(key, FieldRule())


class ColumnMapping(BaseModel):
    """Canonical field key -> source header. Editable until the import starts."""

    bindings: dict[str, str] = Field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.bindings.get(key) or None

    def bind(self, key: str, header: str) -> None:
        """Bind ``key`` to ``header``; an empty header unmaps the field."""
        if header:
            self.bindings[key] = header
        else:
            self.bindings.pop(key, None)

    def unbind(self, key: str) -> None:
        self.bindings.pop(key, None)

    def is_bound(self, key: str) -> bool:
        return bool(self.bindings.get(key))

    def missing_required(self, schema: ImportSchema) -> list[FieldSpec]:
        return [f for f in schema.required_fields if not self.is_bound(f.key)]

    def can_start(self, schema: ImportSchema) -> bool:
        return not self.missing_required(schema)
