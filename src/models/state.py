"""
Program state model and pipeline helper

Defines the ProgramState dataclass carried through the command-line
pipeline and the pipeline() helper for composing stages.
"""

from argparse import Namespace
from dataclasses import dataclass, field, fields
from functools import reduce
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Type, TypeVar


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the command-line pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: CLI options
        - env_check: templatePath, bindings, envOK
        - source_load: templateSource
        - template_compile: template
        - output_render: renderResult
        - results_report: (terminal stage, writes renderResult)

    Attributes:
        templateFile: Template path as given on the command line
        encoding: Source encoding (None: configured default)
        html: Render in HTML mode
        contextData: YAML/JSON mapping given with -c
        datafile: YAML/JSON file given with -f
        showSource: Print generated Python instead of rendering
        highlight: Print highlighted template instead of rendering
        output: Output file (None: stdout)
        verbosity: Logging verbosity level (0-3)
    """

    # CLI arguments
    templateFile: str = field(default="")
    encoding: Optional[str] = field(default=None)
    html: bool = field(default=False)
    contextData: Optional[str] = field(default=None)
    datafile: Optional[str] = field(default=None)
    showSource: bool = field(default=False)
    highlight: bool = field(default=False)
    output: Optional[str] = field(default=None)
    verbosity: int = field(default=0)

    # Pipeline state
    envOK: bool = field(default=False)
    templatePath: Path = field(default=Path("/"))
    bindings: Dict[str, Any] = field(default_factory=dict)
    templateSource: Optional[str] = field(default=None)
    template: Optional[Any] = field(default=None)  # Template at runtime
    renderResult: Optional[str] = field(default=None)

    @classmethod
    def state_createFromNamespace(cls: Type["ProgramState"], options: Namespace) -> "ProgramState":
        """
        Create ProgramState from an argparse Namespace.

        Options without a matching field are ignored.
        """
        valid_fields = {f.name for f in fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**filtered_options)

    def copy(self: PS) -> PS:
        """Shallow copy of the state"""
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(state, env_check, source_load, template_compile)

    reads left-to-right for template_compile(source_load(env_check(state))).
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
