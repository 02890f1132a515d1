# bootstrap_installer/bs_states.py
# -*- coding: utf-8 -*-
"""
Transient state values exchanged between the bootstrap steps.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class QueryStatus(str, Enum):
    """Outcome of a presence query against a host registry."""

    PRESENT = "present"
    ABSENT = "absent"
    # The query itself errored. The bootstrap treats this exactly like
    # ABSENT, but the distinction is kept so it can be logged.
    QUERY_FAILED = "query_failed"


@dataclass(frozen=True)
class QueryResult:
    status: QueryStatus
    version: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def present(cls, version: Optional[str]) -> "QueryResult":
        return cls(QueryStatus.PRESENT, version=version)

    @classmethod
    def absent(cls) -> "QueryResult":
        return cls(QueryStatus.ABSENT)

    @classmethod
    def failed(cls, error: BaseException) -> "QueryResult":
        return cls(QueryStatus.QUERY_FAILED, error=error)

    @property
    def is_present(self) -> bool:
        return self.status is QueryStatus.PRESENT


class ChannelState(str, Enum):
    """Registration and trust status of the primary repository."""

    UNCONFIGURED = "unconfigured"
    UNTRUSTED = "configured_untrusted"
    TRUSTED = "configured_trusted"


@dataclass(frozen=True)
class InstallOutcome:
    """Tagged result of one install attempt."""

    succeeded: bool
    version: Optional[str] = None
    cause: Optional[BaseException] = None

    @classmethod
    def success(cls, version: Optional[str] = None) -> "InstallOutcome":
        return cls(True, version=version)

    @classmethod
    def failure(cls, cause: BaseException) -> "InstallOutcome":
        return cls(False, cause=cause)
