"""
Function Registry
=================

A plain name -> descriptor table used by the reducer to resolve bare
identifiers that head an expression (the implicit call form):

    msg 'Hello' @name     ->   msg(sconcat('Hello', @name))

The registry is populated during an explicit initialization phase and then
frozen. After freezing it is only ever read, so one registry can be shared
by compilations running in different threads.

Usage
-----
>>> registry = FunctionRegistry()
>>> registry.register(CallableDescriptor("greet", "Greets a player"))
>>> registry.freeze()
>>> registry.lookup("greet").name
'greet'
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from mscript.errors import RegistryError
from mscript.compiler.ast import AUTOCONCAT, CBRACE, CBRACKET, PAREN
from mscript.compiler.symbols import (
    ASSIGN,
    IDENTITY,
    NEGATE,
    OPERATIONS,
    POSTFIX_OPERATIONS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallableDescriptor:
    """
    Describes a function the compiler can emit a call to.

    Attributes:
        name: Function name as written in scripts
        docs: One-line description
        internal: True for compiler-internal functions, which scripts
                  cannot call by bare name
    """
    name: str
    docs: str = ""
    internal: bool = False


class FunctionRegistry:
    """
    Name-keyed table of callable descriptors.

    Attributes:
        frozen: True once freeze() has been called
    """

    def __init__(self, descriptors: Iterable[CallableDescriptor] = ()):
        self._functions: dict[str, CallableDescriptor] = {}
        self.frozen = False
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: CallableDescriptor) -> None:
        """
        Add a descriptor to the registry.

        Raises:
            RegistryError: If the registry is frozen or the name is taken
        """
        if self.frozen:
            raise RegistryError(
                f"cannot register '{descriptor.name}': registry is frozen"
            )
        if descriptor.name in self._functions:
            raise RegistryError(f"function '{descriptor.name}' is already registered")
        self._functions[descriptor.name] = descriptor

    def freeze(self) -> "FunctionRegistry":
        """End the initialization phase; further registration is an error."""
        self.frozen = True
        logger.debug(f"Function registry frozen with {len(self._functions)} functions")
        return self

    def lookup(self, name: str) -> Optional[CallableDescriptor]:
        """Return the descriptor registered under name, or None."""
        return self._functions.get(name)

    def is_callable_by_name(self, name: str) -> bool:
        """True if scripts may call name as a bare identifier."""
        descriptor = self._functions.get(name)
        return descriptor is not None and not descriptor.internal

    def names(self) -> list[str]:
        """Return all registered names, sorted."""
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[CallableDescriptor]:
        return iter(self._functions.values())

    def __len__(self) -> int:
        return len(self._functions)


# =============================================================================
# Built-in Functions
# =============================================================================

_COMPILER_INTERNALS = (
    (PAREN, "Parenthesized group; evaluates to its single child"),
    ("centry", "Builds a label/value entry"),
    (AUTOCONCAT, "Unreduced expression list, removed before runtime"),
    ("sconcat", "Concatenates values as strings"),
    ("concat", "Concatenates values"),
    (CBRACKET, "Bracket group"),
    (CBRACE, "Brace group"),
    ("dyn", "Returns its argument; never optimized away"),
    (NEGATE, "Arithmetic negation"),
    (IDENTITY, "Returns its argument unchanged"),
    (ASSIGN, "Assigns a value to a variable"),
)

_SCRIPT_FUNCTIONS = (
    ("msg", "Sends a message to the current player"),
    ("die", "Sends a message and stops the script"),
    ("broadcast", "Sends a message to every player"),
    ("console", "Writes a message to the server console"),
    ("array", "Creates an array from its arguments"),
)


def builtin_descriptors() -> list[CallableDescriptor]:
    """Return descriptors for the operator, internal and script functions."""
    descriptors = [
        CallableDescriptor(name, docs, internal=True)
        for name, docs in _COMPILER_INTERNALS
    ]
    seen = {d.name for d in descriptors}

    operator_names = list(OPERATIONS.values()) + list(POSTFIX_OPERATIONS.values())
    for name in operator_names:
        if name not in seen:
            descriptors.append(CallableDescriptor(name, f"Operator function '{name}'"))
            seen.add(name)

    for name, docs in _SCRIPT_FUNCTIONS:
        descriptors.append(CallableDescriptor(name, docs))
    return descriptors


# Built once at import and frozen, so it can be shared freely
_DEFAULT_REGISTRY: FunctionRegistry = FunctionRegistry(builtin_descriptors()).freeze()


def default_registry() -> FunctionRegistry:
    """Return the shared, frozen registry of built-in functions."""
    return _DEFAULT_REGISTRY
