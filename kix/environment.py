"""
Environment and scoping system for the Kix scripting language
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from kix.errors import InternalError, KixRuntimeError
from kix.tokens import Token


class GlobalEnvironment:
    """The outermost scope: bindings stored by name, kept for the whole session"""

    def __init__(self):
        self.values: Dict[str, Any] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def define(self, name: str, value: Any):
        """Create or overwrite a global binding"""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        raise KixRuntimeError.undefined_variable(name)

    def assign(self, name: Token, value: Any):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        raise KixRuntimeError.undefined_variable(name)


class Environment:
    """A local frame: values stored by slot in declaration order.

    ``enclosing`` is None for frames opened directly under the globals.
    Frames are shared by every closure created inside them and live as
    long as any of those closures does.
    """

    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.slots: List[Any] = []

    def define(self, value: Any):
        """Append a new binding; its slot is its declaration index"""
        self.slots.append(value)

    def ancestor(self, distance: int) -> Optional['Environment']:
        environment = self
        for _ in range(distance):
            if environment is None:
                return None
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, slot: int, name: Token) -> Any:
        frame = self.ancestor(distance)
        if frame is None or slot >= len(frame.slots):
            raise InternalError.unresolved_slot(name, distance, slot)
        return frame.slots[slot]

    def assign_at(self, distance: int, slot: int, name: Token, value: Any):
        frame = self.ancestor(distance)
        if frame is None or slot >= len(frame.slots):
            raise InternalError.unresolved_slot(name, distance, slot)
        frame.slots[slot] = value


class KixCallable(ABC):
    """Anything that can appear before '(' in a call"""

    @abstractmethod
    def arity(self) -> int:
        """Return number of parameters this function expects"""

    @abstractmethod
    def call(self, interpreter, arguments: List[Any]) -> Any:
        pass


class KixFunction(KixCallable):
    """User-defined function bundled with the frame it was declared in"""

    def __init__(self, declaration, closure: Optional[Environment]):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter, arguments: List[Any]) -> Any:
        # Parent is the declaring frame, not the caller's
        environment = Environment(self.closure)
        for argument in arguments:
            environment.define(argument)

        signal = interpreter.execute_block(self.declaration.body, environment)
        return signal.value

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class NativeFunction(KixCallable):
    """Built-in function implemented in Python"""

    def __init__(self, name: str, arity: int, function: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.function(interpreter, *arguments)

    def __str__(self):
        return "<native fn>"
