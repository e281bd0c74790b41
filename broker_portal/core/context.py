import contextvars

_broker_id: contextvars.ContextVar[str] = contextvars.ContextVar("broker_id", default="-")
_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


def set_broker_id(broker_id: str) -> None:
    _broker_id.set(broker_id)


def get_broker_id() -> str:
    return _broker_id.get()


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def clear_context() -> None:
    _broker_id.set("-")
    _request_id.set("-")
