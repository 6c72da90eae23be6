"""Out-of-process invocation of the external rendering engine."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

from .config import EngineConfig
from .errors import PreconditionError, RenderError
from .logging import get_logger

PARAMS_ENV_VAR = "REPORTFACTORY_PARAMS"

_STDERR_TAIL_LINES = 20


@dataclass
class RenderRequest:
    """Everything the engine needs to render one document."""

    input: Path
    output_dir: Path
    output_name: str
    params: Dict[str, Any] = field(default_factory=dict)
    quiet: bool = True
    options: Sequence[str] = ()


class IsolatedRenderer:
    """Runs the rendering engine in a fresh subprocess per document."""

    def __init__(
        self,
        engine: EngineConfig | None = None,
        runner: Callable[..., subprocess.CompletedProcess] | None = None,
    ) -> None:
        self.engine = engine or EngineConfig()
        self._runner = runner or subprocess.run
        self.logger = get_logger("render")

    def check_available(self) -> None:
        """Raise PreconditionError when the engine executable cannot be found."""
        if not self.engine.command:
            raise PreconditionError("No rendering engine command is configured")
        executable = self.engine.executable
        if shutil.which(executable) is None:
            raise PreconditionError(
                f"Rendering engine '{executable}' is not installed; please install it before proceeding"
            )

    def build_command(self, request: RenderRequest) -> List[str]:
        substitutions = {
            "{input}": str(request.input),
            "{output_dir}": str(request.output_dir),
            "{output_name}": request.output_name,
        }
        args: List[str] = []
        for template in self.engine.command:
            for placeholder, value in substitutions.items():
                template = template.replace(placeholder, value)
            args.append(template)
        if request.quiet and self.engine.quiet_flag:
            args.append(self.engine.quiet_flag)
        args.extend(request.options)
        return args

    def render(self, request: RenderRequest) -> None:
        """Render ``request.input`` into ``request.output_dir``."""
        request.output_dir.mkdir(parents=True, exist_ok=True)
        args = self.build_command(request)
        env = os.environ.copy()
        env[PARAMS_ENV_VAR] = json.dumps(request.params, default=str)
        self.logger.debug("Running engine: %s", " ".join(args))

        try:
            completed = self._runner(
                args,
                cwd=str(request.input.parent),
                env=env,
                timeout=self.engine.timeout,
                capture_output=request.quiet,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise PreconditionError(
                f"Unable to locate rendering engine '{args[0]}'"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise RenderError(
                f"Rendering {request.input.name} timed out after {exc.timeout} seconds",
                (request.output_name,),
            ) from exc

        if request.quiet:
            _log_stream(self.logger, "stdout", completed.stdout)
            _log_stream(self.logger, "stderr", completed.stderr)

        if completed.returncode != 0:
            detail = _tail(completed.stderr) if request.quiet else ""
            message = f"Rendering {request.input.name} failed with exit code {completed.returncode}"
            if detail:
                message = f"{message}:\n{detail}"
            raise RenderError(message, (request.output_name,))


def _log_stream(logger, label: str, text: str | None) -> None:
    if text and text.strip():
        logger.debug("engine %s:\n%s", label, text.rstrip())


def _tail(text: str | None) -> str:
    if not text:
        return ""
    lines = text.strip().splitlines()
    return "\n".join(lines[-_STDERR_TAIL_LINES:])


__all__ = ["IsolatedRenderer", "PARAMS_ENV_VAR", "RenderRequest"]
