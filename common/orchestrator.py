# common/orchestrator.py
# -*- coding: utf-8 -*-
"""
Sequential stage runner for the bootstrap workflow.

Stages run in the order they were added and share one `context` dict, which
is how a stage hands its findings (versions, channel state, install path)
to the stages after it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .command_utils import get_symbols, log_bootstrap


@dataclass
class Stage:
    name: str
    func: Callable[..., Any]
    args: List[Any] = field(default_factory=list)
    kwargs: Dict[str, Any] = field(default_factory=dict)
    # A fatal stage stops the run and re-raises; others only log.
    fatal: bool = True


class Orchestrator:
    """Runs named stages in sequence over a shared context."""

    def __init__(
        self,
        app_settings: Any,
        orchestrator_logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.logger = orchestrator_logger or logging.getLogger(__name__)
        self.stages: List[Stage] = []
        self.context: Dict[str, Any] = {}
        self.completed: List[str] = []
        self.failures: Dict[str, BaseException] = {}

    def add_task(
        self,
        name: str,
        func: Callable[..., Any],
        args: Optional[List[Any]] = None,
        kwargs: Optional[Dict[str, Any]] = None,
        fatal: bool = True,
    ) -> Stage:
        """
        Appends a stage. `func` is called as
        `func(*args, context=..., app_settings=..., **kwargs)`.
        """
        stage = Stage(name, func, list(args or []), dict(kwargs or {}), fatal)
        self.stages.append(stage)
        self.logger.debug(f"Stage '{name}' queued (fatal={fatal}).")
        return stage

    def run(self) -> bool:
        """
        Runs every stage once, in order.

        The return value of each stage is stored in the context under
        "<stage name>_result".

        Returns:
            True when no stage failed, False when a non-fatal stage failed.

        Raises:
            Exception: Whatever the first failing fatal stage raised,
                unchanged.
        """
        symbols = get_symbols(self.app_settings)
        total = len(self.stages)
        log_bootstrap(
            f"{symbols.get('rocket', '🚀')} Running {total} stages.",
            "info",
            self.logger,
            self.app_settings,
        )
        for position, stage in enumerate(self.stages, start=1):
            log_bootstrap(
                f"--- [{position}/{total}] {stage.name} ---",
                "info",
                self.logger,
                self.app_settings,
            )
            try:
                result = stage.func(
                    *stage.args,
                    context=self.context,
                    app_settings=self.app_settings,
                    **stage.kwargs,
                )
            except Exception as e:
                self.failures[stage.name] = e
                if stage.fatal:
                    log_bootstrap(
                        f"{symbols.get('critical', '🔥')} Stage '{stage.name}' failed: {e}",
                        "critical",
                        self.logger,
                        self.app_settings,
                        exc_info=True,
                    )
                    log_bootstrap(
                        f"Stopping after {len(self.completed)} of {total} stages.",
                        "error",
                        self.logger,
                        self.app_settings,
                    )
                    raise
                log_bootstrap(
                    f"{symbols.get('warning', '⚠️')} Stage '{stage.name}' failed: {e}. Not fatal; continuing.",
                    "warning",
                    self.logger,
                    self.app_settings,
                )
                continue

            self.context[f"{stage.name}_result"] = result
            self.completed.append(stage.name)
            log_bootstrap(
                f"{symbols.get('success', '✅')} {stage.name} done.",
                "success",
                self.logger,
                self.app_settings,
            )

        log_bootstrap(
            f"{symbols.get('sparkles', '✨')} {len(self.completed)} of {total} stages completed.",
            "info",
            self.logger,
            self.app_settings,
        )
        return not self.failures
