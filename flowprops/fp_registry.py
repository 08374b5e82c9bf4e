#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import copy
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Set

from fp_ast import Expr, TypeNode
from fp_validators import ShapeValidator, Validator


class ResolutionKind(Enum):
    INTERNAL = auto()
    IMPORTED = auto()
    RECURSIVE = auto()
    UNRESOLVED = auto()


@dataclass
class InternalEntry:
    """A type fully defined and translated within the current unit."""
    name: str
    validator: Validator
    node: Optional[TypeNode] = None
    type_params: List[str] = field(default_factory=list)


@dataclass
class ImportedEntry:
    """
    A type imported from another unit.

    access stays None until the owning import statement has been materialized.
    """
    local_name: str
    source_name: str
    location: str
    access: Optional[Expr] = None
    # access names a prop-types validator (react's Node/ComponentType) rather than a shared binding
    is_validator: bool = False


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    name: str
    validator: Optional[Validator] = None
    access: Optional[Expr] = None
    binding: Optional[str] = None
    entry: Optional[InternalEntry] = None
    pending_import: bool = False
    is_validator: bool = False


class TypeRegistry:
    """
    Per-unit mapping from a type name, as written in the unit, to what a
    validator for it is built from.

    - internal : validators translated from local aliases/interfaces/opaque types
    - imported : placeholders for type imports, bound to an access expression later
    - exported : hoisted generated binding names, reusable instead of re-deriving
    - classes  : classes declared in the unit, checked with instanceOf

    Lifetime is exactly one compilation unit.
    """

    def __init__(self) -> None:
        self.internal: Dict[str, InternalEntry] = {}
        self.imported: Dict[str, ImportedEntry] = {}
        self.exported: Dict[str, str] = {}
        self.classes: Dict[str, Optional[ShapeValidator]] = {}
        # alias name -> binding, while the alias body is being translated
        self._in_progress: Dict[str, str] = {}
        self.recursive: Set[str] = set()

    # --- declarations ---

    def declare_internal(
            self,
            name: str,
            validator: Validator,
            *,
            node: Optional[TypeNode] = None,
            type_params: Optional[List[str]] = None,
    ) -> None:
        # Redeclaration is a user error outside our remit: last write wins.
        self.internal[name] = InternalEntry(name, validator, node, list(type_params or []))

    def declare_imported(self, local_name: str, source_name: str, location: str) -> ImportedEntry:
        entry = ImportedEntry(local_name, source_name, location)
        self.imported[local_name] = entry
        return entry

    def bind_imported_access(self, local_name: str, access: Expr, *, is_validator: bool = False) -> None:
        entry = self.imported.get(local_name)
        if entry is None:
            raise KeyError(f"no imported type named '{local_name}'")
        entry.access = access
        entry.is_validator = is_validator

    def declare_exported(self, name: str, binding: str) -> None:
        self.exported[name] = binding

    def declare_class(self, name: str, shape: Optional[ShapeValidator] = None) -> None:
        self.classes[name] = shape

    def begin_alias(self, name: str, binding: str) -> None:
        self._in_progress[name] = binding

    def end_alias(self, name: str) -> bool:
        """Stop tracking `name`; returns True if its body referenced itself."""
        self._in_progress.pop(name, None)
        return name in self.recursive

    # --- lookups ---

    def exported_binding(self, name: str) -> Optional[str]:
        return self.exported.get(name)

    def resolve(self, name: str) -> Resolution:
        """
        Look up a type name.

        Internal entries return a private copy of the stored validator so a
        caller lowering `required` never changes what later lookups see.
        """
        binding = self._in_progress.get(name)
        if binding is not None:
            self.recursive.add(name)
            return Resolution(ResolutionKind.RECURSIVE, name, binding=binding)

        entry = self.internal.get(name)
        if entry is not None:
            return Resolution(
                ResolutionKind.INTERNAL,
                name,
                validator=copy.deepcopy(entry.validator),
                entry=entry,
            )

        imported = self.imported.get(name)
        if imported is not None:
            if imported.access is None:
                return Resolution(ResolutionKind.UNRESOLVED, name, pending_import=True)
            return Resolution(ResolutionKind.IMPORTED, name, access=imported.access,
                              is_validator=imported.is_validator)

        return Resolution(ResolutionKind.UNRESOLVED, name)
