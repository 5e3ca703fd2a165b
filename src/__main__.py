#!/usr/bin/env python3
"""
embtext - render <% %> templates from the command line

Usage:
    embtext template.txt -c '{name: World}'
    embtext page.html.embt -H -f data.yaml -o page.html

Examples:
    # Plain-text render with inline YAML bindings
    embtext greeting.txt -c 'name: World'

    # HTML render with bindings from a JSON file
    embtext page.html.embt -H -f context.json

    # Show the Python program a template compiles to
    embtext page.html.embt -x

    # Show the template with syntax highlighting
    embtext page.html.embt -H --highlight

    # Verbose output
    embtext page.html.embt -H -f context.yaml -vv
"""

import json
import sys
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter, Namespace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import appsettings
from .lib import (
    EmbtextError,
    HtmlTemplate,
    LOG,
    Template,
    __version__,
    state_connectToLogger,
    template_highlight,
)
from .lib.loader import source_load as loader_sourceLoad
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    prog="embtext",
    description="embtext - render templates with embedded Python directives",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument("templateFile", type=str, help="Template file to render")

parser.add_argument("-H", "--html", action="store_true", help="HTML mode: escape <%%= %%> output")

parser.add_argument(
    "-c", "--context", dest="contextData", default=None, type=str,
    help="Bindings as a YAML or JSON mapping (e.g. '{title: Hello}')",
)

parser.add_argument(
    "-f", "--datafile", default=None, type=str,
    help="Bindings file (.json read as JSON, anything else as YAML)",
)

parser.add_argument(
    "-x", "--source", dest="showSource", action="store_true",
    help="Print the generated Python program instead of rendering",
)

parser.add_argument(
    "--highlight", action="store_true",
    help="Print the template with syntax highlighting instead of rendering",
)

parser.add_argument(
    "--encoding", default=None, type=str,
    help=f"Template file encoding (default: {appsettings.default_encoding})",
)

parser.add_argument("-o", "--output", default=None, type=str, help="Write output to file instead of stdout")

parser.add_argument(
    "-v", "--verbosity", action="count", default=0,
    help="Increase log verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def bindings_parse(text: str, origin: str, as_json: bool = False) -> Dict[str, Any]:
    """
    Parse a YAML (or JSON) mapping of bindings

    Raises:
        ValueError: Text is not valid or not a mapping
    """
    try:
        data = json.loads(text) if as_json else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"cannot parse {origin}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{origin} must be a mapping, got {type(data).__name__}")
    return data


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the template path and collect bindings.

    Bindings from --datafile are loaded first; --context values override them.

    Exits:
        1 if the template or data file is missing, or bindings are invalid
    """
    state = inputstate.copy()
    LOG("Checking environment...", level=2)

    template_path = Path(state.templateFile)
    if not template_path.is_file():
        print(f"Error: Template file not found: {template_path}", file=sys.stderr)
        sys.exit(1)
    state.templatePath = template_path
    LOG(f"Template file: {template_path}", level=2)

    bindings: Dict[str, Any] = {}
    try:
        if state.datafile:
            datafile = Path(state.datafile)
            if not datafile.is_file():
                print(f"Error: Data file not found: {datafile}", file=sys.stderr)
                sys.exit(1)
            text = datafile.read_text(encoding=appsettings.default_encoding)
            bindings.update(bindings_parse(text, str(datafile), as_json=datafile.suffix == ".json"))
            LOG(f"Loaded {len(bindings)} bindings from {datafile}", level=2)
        if state.contextData:
            bindings.update(bindings_parse(state.contextData, "--context"))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    state.bindings = bindings
    state.envOK = True
    return state


def source_load(inputstate: ProgramState) -> ProgramState:
    """
    Read template source text.

    Exits:
        1 if the file cannot be read or decoded
    """
    state = inputstate.copy()
    LOG("Reading template...", level=1)
    try:
        state.templateSource = loader_sourceLoad(state.templatePath, state.encoding)
    except EmbtextError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    return state


def template_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile the template source (skipped for --highlight).

    Exits:
        1 on template syntax errors
    """
    state = inputstate.copy()
    if state.highlight:
        return state

    LOG("Compiling template...", level=1)
    template_class = HtmlTemplate if state.html else Template
    try:
        state.template = template_class(state.templateSource or "", str(state.templatePath))
    except EmbtextError as e:
        print(f"Compile error: {e}", file=sys.stderr)
        sys.exit(1)
    LOG(f"Compiled {len(state.template.program.instructions)} instructions", level=2)
    return state


def output_render(inputstate: ProgramState) -> ProgramState:
    """
    Produce the output text: rendered template, generated source, or
    highlighted template.

    Exits:
        1 if directive code fails during render
    """
    state = inputstate.copy()

    if state.highlight:
        formatter = "terminal" if sys.stdout.isatty() and not state.output else "text"
        state.renderResult = template_highlight(state.templateSource or "", html=state.html, formatter=formatter)
        return state

    if state.showSource:
        state.renderResult = state.template.source
        return state

    LOG("Rendering...", level=1)
    try:
        state.renderResult = state.template.render(state.bindings)
    except EmbtextError as e:
        print(f"Render error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Write output to stdout or the --output file.

    Exits:
        1 if there is no output or it cannot be written
    """
    state = inputstate.copy()
    if state.renderResult is None:
        print("Error: Nothing rendered", file=sys.stderr)
        sys.exit(1)

    if state.output:
        try:
            Path(state.output).write_text(state.renderResult, encoding=appsettings.default_encoding)
        except OSError as e:
            print(f"Error writing {state.output}: {e}", file=sys.stderr)
            sys.exit(1)
        LOG(f"Wrote {len(state.renderResult)} characters to {state.output}", level=1)
    else:
        sys.stdout.write(state.renderResult)
    return state


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point - render a template file.

    Orchestrates the pipeline:
        1. env_check: Validate paths, collect bindings
        2. source_load: Read template text
        3. template_compile: Compile to a Template
        4. output_render: Render (or show source / highlight)
        5. results_report: Write output
    """
    options: Namespace = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(options)

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_load, template_compile, output_render, results_report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
