"""Base aggregate class and @handles decorator.

Business logic lives as methods on the aggregate class. The @handles
decorator registers a method as the handler for one command type and
records the events it returns.

Example usage:
    class Sale(Aggregate[SaleState]):
        domain = "sale"

        @handles(RemoveItem)
        def handle_remove_item(self, cmd: RemoveItem) -> ItemRemoved:
            require_in(cmd.item_id, self.state.items, errmsg.ITEM_NOT_IN_CART)
            return ItemRemoved(item_id=cmd.item_id)

        def _create_empty_state(self) -> SaleState:
            return SaleState()

        def _apply_event(self, state, event):
            sale_state_router.apply(state, event)

A handler must raise before returning if the command is invalid; events are
only applied once the handler has returned, so a rejected command never
leaves partial changes behind.
"""

from __future__ import annotations

import inspect
import typing
from abc import ABC, abstractmethod
from functools import wraps
from typing import Callable, Generic, Iterable, Optional, TypeVar


def validate_command_handler(method: Callable, command_type: type) -> str:
    """Check that the handler's command parameter is annotated with ``command_type``.

    Raises:
        TypeError: If the hint is missing or doesn't match.
    """
    hints = typing.get_type_hints(method)
    params = list(inspect.signature(method).parameters.keys())
    if len(params) < 2:
        raise TypeError(f"{method.__name__}: must have cmd parameter")

    cmd_param = params[1]
    if cmd_param not in hints:
        raise TypeError(f"{method.__name__}: missing type hint for '{cmd_param}'")

    hint_type = hints[cmd_param]
    if hint_type != command_type:
        raise TypeError(
            f"{method.__name__}: @handles({command_type.__name__}) "
            f"doesn't match type hint {getattr(hint_type, '__name__', hint_type)}"
        )
    return cmd_param


def handles(command_type: type):
    """Decorator for command handler methods on Aggregate subclasses.

    The decorated method returns a single event, a tuple of events, or None
    when the command is a no-op.
    """

    def decorator(method: Callable) -> Callable:
        validate_command_handler(method, command_type)

        @wraps(method)
        def wrapper(self, *args, **kwargs):
            result = method(self, *args, **kwargs)
            if result is None:
                return result
            events = result if isinstance(result, tuple) else (result,)
            for event in events:
                self._apply_and_record(event)
            return result

        wrapper._is_handler = True
        wrapper._command_type = command_type
        return wrapper

    return decorator


StateT = TypeVar("StateT")


class Aggregate(Generic[StateT], ABC):
    """Base class for event-sourced aggregates.

    Subclasses must:
    - Set `domain` class attribute
    - Implement `_create_empty_state() -> StateT`
    - Implement `_apply_event(state: StateT, event) -> None`
    - Decorate command handlers with `@handles(CommandType)`
    """

    domain: str
    _dispatch_table: dict[type, str] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        if inspect.isabstract(cls):
            return

        if not getattr(cls, "domain", None):
            raise TypeError(f"{cls.__name__} must define 'domain' class attribute")

        cls._dispatch_table = cls._build_dispatch_table()

    @classmethod
    def _build_dispatch_table(cls) -> dict[type, str]:
        """Scan for @handles methods and build dispatch table."""
        table = {}
        for name in dir(cls):
            attr = getattr(cls, name, None)
            if callable(attr) and getattr(attr, "_is_handler", False):
                cmd_type = attr._command_type
                if cmd_type in table:
                    raise TypeError(f"{cls.__name__}: duplicate handler for {cmd_type.__name__}")
                table[cmd_type] = name
        return table

    def __init__(self, events: Optional[Iterable] = None):
        self._events: list = list(events or [])
        self._state: Optional[StateT] = None

    def dispatch(self, command) -> list:
        """Dispatch a command to its @handles method.

        Returns the events recorded while handling it.

        Raises:
            ValueError: If no handler matches the command type.
        """
        method_name = self._dispatch_table.get(type(command))
        if method_name is None:
            raise ValueError(f"Unknown command: {type(command).__name__}")
        self._get_state()
        start = len(self._events)
        getattr(self, method_name)(command)
        return self._events[start:]

    @property
    def events(self) -> tuple:
        return tuple(self._events)

    @property
    def state(self) -> StateT:
        return self._get_state()

    def _get_state(self) -> StateT:
        """Get current state, rebuilding from events if needed."""
        if self._state is None:
            self._state = self._rebuild()
        return self._state

    def _rebuild(self) -> StateT:
        state = self._create_empty_state()
        for event in self._events:
            self._apply_event(state, event)
        return state

    def _apply_and_record(self, event) -> None:
        """Apply event to cached state and append it to the log."""
        if self._state is not None:
            self._apply_event(self._state, event)
        self._events.append(event)

    @abstractmethod
    def _create_empty_state(self) -> StateT:
        ...

    @abstractmethod
    def _apply_event(self, state: StateT, event) -> None:
        ...
