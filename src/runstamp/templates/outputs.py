"""Output extraction from materialized objects."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from runstamp.core.errors import OutputPathNotSatisfiedError
from runstamp.templates.jsonpath import PathNotFoundError, PathSyntaxError, compile_path

Outputs = dict[str, Any]


def extract_outputs(obj: dict[str, Any], output_paths: Mapping[str, str]) -> Outputs:
    """
    Evaluate every declared output path against an object.

    Either every path resolves and the full mapping is returned, or the first
    unresolved path raises and nothing is returned. Values are deep copies.

    Args:
        obj: Materialized object to read from
        output_paths: Output name to path expression

    Returns:
        Output name to extracted value (empty when no paths are declared)

    Raises:
        OutputPathNotSatisfiedError: If any path cannot be resolved
    """
    outputs: Outputs = {}
    for name, path in output_paths.items():
        try:
            value = compile_path(path).evaluate(obj)
        except PathSyntaxError as e:
            raise OutputPathNotSatisfiedError(
                f"get output: evaluate: parse: {e}",
                details={"output": name, "path": path},
            ) from e
        except PathNotFoundError as e:
            raise OutputPathNotSatisfiedError(
                f"get output: evaluate: find results: {e}",
                details={"output": name, "path": path},
            ) from e
        outputs[name] = copy.deepcopy(value)
    return outputs


def outputs_to_json(outputs: Outputs) -> dict[str, bytes]:
    """Raw JSON fragment for each output, e.g. ``b'"is a string"'``."""
    return {name: json.dumps(value).encode("utf-8") for name, value in outputs.items()}
