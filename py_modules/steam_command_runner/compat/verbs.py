"""Verbs Steam passes to a compatibility tool."""
from enum import Enum

from ..errors import UnknownVerb


class Verb(str, Enum):
    WAIT_FOR_EXIT_AND_RUN = "waitforexitandrun"
    RUN = "run"
    GET_COMPAT_PATH = "getcompatpath"
    GET_NATIVE_PATH = "getnativepath"

    @classmethod
    def parse(cls, value: str) -> "Verb":
        try:
            return cls(value.lower())
        except ValueError:
            raise UnknownVerb(value) from None

    def should_execute(self) -> bool:
        return self in (Verb.WAIT_FOR_EXIT_AND_RUN, Verb.RUN)
