"""
Observable state for streaming endpoints.

``UiState`` mirrors what the mobile screens render (loading, data, or an error
message). ``StateHolder`` is an observable value with explicit unsubscribe, and
``ListenerScope`` owns the Firestore snapshot listeners feeding those holders so
a re-issued subscription replaces, rather than duplicates, the previous one.
"""
import logging
import threading
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Something went wrong. Please try again."


class UiState(Generic[T]):
    """Base class for the Loading / Success / Error states."""

    kind = "unknown"

    @property
    def is_loading(self) -> bool:
        return isinstance(self, Loading)

    @property
    def is_success(self) -> bool:
        return isinstance(self, Success)

    @property
    def is_error(self) -> bool:
        return isinstance(self, Error)

    def data_or_none(self) -> Optional[T]:
        return None

    def map(self, transform: Callable[[T], R]) -> "UiState[R]":
        return self

    def to_frame(self) -> Dict[str, Any]:
        return {"state": self.kind}

    @staticmethod
    def from_exception(ex: BaseException, default: str = DEFAULT_ERROR_MESSAGE) -> "Error":
        message = str(ex).strip() if ex is not None else ""
        return Error(message or default)


class Loading(UiState[Any]):
    kind = "loading"

    def __eq__(self, other):
        return isinstance(other, Loading)

    def __hash__(self):
        return hash(self.kind)

    def __repr__(self):
        return "Loading()"


class Success(UiState[T]):
    kind = "success"

    def __init__(self, data: T):
        self.data = data

    def data_or_none(self) -> Optional[T]:
        return self.data

    def map(self, transform: Callable[[T], R]) -> "UiState[R]":
        return Success(transform(self.data))

    def to_frame(self) -> Dict[str, Any]:
        return {"state": self.kind, "data": self.data}

    def __eq__(self, other):
        return isinstance(other, Success) and other.data == self.data

    def __hash__(self):
        return hash((self.kind, repr(self.data)))

    def __repr__(self):
        return f"Success({self.data!r})"


class Error(UiState[Any]):
    kind = "error"

    def __init__(self, message: str):
        self.message = message

    def to_frame(self) -> Dict[str, Any]:
        return {"state": self.kind, "message": self.message}

    def __eq__(self, other):
        return isinstance(other, Error) and other.message == self.message

    def __hash__(self):
        return hash((self.kind, self.message))

    def __repr__(self):
        return f"Error({self.message!r})"


UiState.Loading = Loading
UiState.Success = Success
UiState.Error = Error


class Subscription:
    """Handle returned by :meth:`StateHolder.subscribe`."""

    def __init__(self, holder: "StateHolder", callback: Callable[[Any], None]):
        self._holder = holder
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._holder._remove(self._callback)


class StateHolder(Generic[T]):
    """
    Observable value.

    Subscribers receive the current value immediately on subscribe and on every
    subsequent change. Assigning a value equal to the current one is a no-op.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self.set(new_value)

    def set(self, new_value: T) -> bool:
        """Update the value; returns False when it was unchanged."""
        with self._lock:
            if new_value == self._value:
                return False
            self._value = new_value
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(new_value)
            except Exception:
                logger.exception("State subscriber raised; dropping it")
                self._remove(callback)
        return True

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        with self._lock:
            self._subscribers.append(callback)
            current = self._value
        callback(current)
        return Subscription(self, callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _remove(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)


class Registration(Protocol):
    """Anything cancellable; Firestore's ``Watch`` satisfies this."""

    def unsubscribe(self) -> None:
        ...


class ListenerScope:
    """
    Owns snapshot-listener registrations for one connection.

    ``launch`` under an existing key cancels the earlier registration first.
    """

    def __init__(self, name: str = "scope"):
        self.name = name
        self._registrations: Dict[str, Registration] = {}
        self._lock = threading.Lock()
        self.closed = False

    def launch(self, key: str, start: Callable[[], Registration]) -> Registration:
        if self.closed:
            raise RuntimeError(f"Listener scope '{self.name}' is closed")

        self.cancel(key)
        registration = start()
        with self._lock:
            self._registrations[key] = registration
        logger.debug("Started listener %s in scope %s", key, self.name)
        return registration

    def cancel(self, key: str) -> bool:
        with self._lock:
            registration = self._registrations.pop(key, None)
        if registration is None:
            return False

        try:
            registration.unsubscribe()
        except Exception:
            logger.warning("Failed to cancel listener %s in scope %s", key, self.name, exc_info=True)
        logger.debug("Cancelled listener %s in scope %s", key, self.name)
        return True

    def cancel_all(self) -> None:
        with self._lock:
            keys = list(self._registrations)
        for key in keys:
            self.cancel(key)
        self.closed = True

    @property
    def active_keys(self) -> List[str]:
        return list(self._registrations)
