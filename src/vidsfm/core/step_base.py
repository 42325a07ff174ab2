"""Base class for all pipeline steps.

Every step declares typed Input, Output, Config via Pydantic models and
receives the external tools it drives through a :class:`Toolbox`, so a step
can be exercised with fake tools and no binaries installed.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

from .errors import PrerequisiteError
from .hardware import Accelerator, detect_accelerator
from .tools import ExternalTool, Toolbox

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses must:
    1. Define concrete Pydantic models for InputT, OutputT, ConfigT
       (the input model provides ``from_run_config``)
    2. Set class variables: name, input_type, output_type, config_type
    3. Implement run() and check_prerequisites()

    Steps whose work can be reused override is_complete() and
    existing_output() together (enforced at class creation); execute()
    consults them before anything else.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(
        self,
        config: ConfigT,
        tools: Toolbox | None = None,
        accelerator: Accelerator | None = None,
    ):
        self.config = config
        self.tools = tools or Toolbox.from_paths()
        self.accelerator = accelerator if accelerator is not None else detect_accelerator()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if (
            cls.is_complete is not BaseStep.is_complete
            and cls.existing_output is BaseStep.existing_output
        ):
            raise TypeError(f"{cls.__name__} overrides is_complete() without existing_output()")

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this pipeline step. Returns output model."""
        ...

    @abstractmethod
    def check_prerequisites(self, inputs: InputT) -> None:
        """Raise PrerequisiteError if a required artifact or tool is missing."""
        ...

    def is_complete(self, inputs: InputT) -> bool:
        """Whether this step's artifacts already exist and may be reused."""
        return False

    def existing_output(self, inputs: InputT) -> OutputT:
        raise NotImplementedError(f"{self.__class__.__name__} cannot reuse prior output")

    def require_tool(self, tool: ExternalTool) -> None:
        if not tool.available():
            raise PrerequisiteError(
                self.name or self.__class__.__name__,
                f"'{tool.binary}' executable not found on PATH",
                f"install {tool.name.split()[0]} or set tools.* in the pipeline config",
            )

    def execute(self, inputs: InputT) -> OutputT:
        """Run with skip detection, prerequisite checks, logging and timing."""
        step_name = self.name or self.__class__.__name__

        if self.is_complete(inputs):
            logger.info(f"[{step_name}] Existing output found, skipping")
            return self.existing_output(inputs)

        logger.info(f"[{step_name}] Validating inputs...")
        self.check_prerequisites(inputs)

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.1f}s")
        return result

