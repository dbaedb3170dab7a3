from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from .errors import ValidationError
from .params import Params


class SecurityLevel(Enum):
    NONE = "none"
    API_KEY = "api_key"
    SIGNED = "signed"

    @property
    def needs_api_key(self) -> bool:
        return self is not SecurityLevel.NONE


Validator = Callable[["Request"], None]


@dataclass
class Request:
    """
    One API call, created fresh per call.

    Endpoint methods fill `query`/`form` and attach validators; the client's
    builder then writes `full_url`, `headers` and `body` exactly once.
    """

    method: str
    path: str
    security: SecurityLevel = SecurityLevel.NONE
    query: Params = field(default_factory=Params)
    form: Params = field(default_factory=Params)
    recv_window: int | None = None
    validators: list[Validator] = field(default_factory=list)

    full_url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def built(self) -> bool:
        return self.full_url is not None

    def set_param(self, key: str, value: Any) -> "Request":
        self.query.set(key, value)
        return self

    def add_param(self, key: str, value: Any) -> "Request":
        self.query.add(key, value)
        return self

    def set_form_param(self, key: str, value: Any) -> "Request":
        self.form.set(key, value)
        return self

    def require(self, *validators: Validator) -> "Request":
        self.validators.extend(validators)
        return self

    def validate(self) -> None:
        for check in self.validators:
            check(self)

    def copy(self) -> "Request":
        return dataclasses.replace(
            self,
            query=self.query.copy(),
            form=self.form.copy(),
            validators=list(self.validators),
            headers=dict(self.headers),
        )


# ---------- request options ----------
RequestOption = Callable[[Request], Request]


def with_recv_window(ms: int) -> RequestOption:
    def option(r: Request) -> Request:
        return dataclasses.replace(r.copy(), recv_window=ms)

    return option


def with_param(key: str, value: Any) -> RequestOption:
    def option(r: Request) -> Request:
        return r.copy().set_param(key, value)

    return option


def with_added_param(key: str, value: Any) -> RequestOption:
    def option(r: Request) -> Request:
        return r.copy().add_param(key, value)

    return option


def with_form_param(key: str, value: Any) -> RequestOption:
    def option(r: Request) -> Request:
        return r.copy().set_form_param(key, value)

    return option


def apply_options(r: Request, opts: tuple[RequestOption, ...] | list[RequestOption]) -> Request:
    for opt in opts:
        r = opt(r)
    return r


# ---------- validators ----------
def _present(r: Request, key: str) -> bool:
    return key in r.query or key in r.form


def required(*keys: str) -> Validator:
    def check(r: Request) -> None:
        for key in keys:
            if not _present(r, key):
                raise ValidationError.mandatory(key)

    return check


def required_one_of(*keys: str) -> Validator:
    def check(r: Request) -> None:
        if not any(_present(r, key) for key in keys):
            raise ValidationError.mandatory(" or ".join(keys))

    return check


def required_together(*keys: str) -> Validator:
    def check(r: Request) -> None:
        given = [key for key in keys if _present(r, key)]
        if given and len(given) != len(keys):
            missing = [key for key in keys if key not in given]
            raise ValidationError(
                f"{', '.join(missing)}: must be set together with {', '.join(given)}",
                field=missing[0],
            )

    return check
