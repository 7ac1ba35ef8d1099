"""
stagehand.integrations.scripting.combined - Extension Dispatch
================================================================

CombinedScriptEngine presents several engines as one: its supported
extensions are the ordered union of theirs, and each script goes to the
first engine that claims its extension (compared case-insensitively).
"""

from __future__ import annotations

import os

import structlog

from stagehand.core.exceptions import EngineSelectionError
from stagehand.core.models import CommandResult
from stagehand.core.variables import VariableDictionary
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.scripting.base import ScriptEngine


logger = structlog.get_logger()


class CombinedScriptEngine(ScriptEngine):
    def __init__(self, engines: list[ScriptEngine]) -> None:
        self.engines = list(engines)

    def supported_extensions(self) -> tuple[str, ...]:
        extensions: dict[str, None] = {}
        for engine in self.engines:
            for extension in engine.supported_extensions():
                extensions.setdefault(extension, None)
        return tuple(extensions)

    def select_engine(self, script_path: str) -> ScriptEngine:
        """Engine responsible for ``script_path``.

        Raises:
            EngineSelectionError: No engine supports the extension.
        """
        extension = os.path.splitext(script_path)[1].lstrip(".").lower()
        for engine in self.engines:
            if extension in (e.lower() for e in engine.supported_extensions()):
                return engine

        raise EngineSelectionError(
            message=(
                f"No script engine on this platform can run '{script_path}'. "
                f"Supported extensions: {', '.join(self.supported_extensions()) or 'none'}"
            ),
            script_path=script_path,
            details={"extension": extension},
        )

    async def execute(
        self,
        script_path: str,
        variables: VariableDictionary,
        runner: CommandLineRunner,
    ) -> CommandResult:
        engine = self.select_engine(script_path)
        logger.debug("script_engine_selected", script=script_path, engine=type(engine).__name__)
        return await engine.execute(script_path, variables, runner)
