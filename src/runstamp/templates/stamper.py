"""
Template stamping.

Turns a raw RunTemplate document into a concrete resource by replacing
``$(<path>)$`` references with values looked up in the templating context.

Supports:
- Whole-value references: ``"$(pipeline.spec.inputs.replicas)$"`` → ``3``
- Embedded references: ``"run-$(pipeline.metadata.name)$"`` → ``"run-build"``
- Dicts and lists: recursively processed
- Other types: returned unchanged
"""

from __future__ import annotations

import copy
import json
import re
from typing import Any

from runstamp import objects
from runstamp.core.errors import StampError
from runstamp.models import Pipeline
from runstamp.templates.jsonpath import PathNotFoundError, PathSyntaxError, compile_path

# Pattern matches $(path)$
REFERENCE_PATTERN = re.compile(r"\$\(([^)]+)\)\$")


def pipeline_templating_context(pipeline: Pipeline) -> dict[str, Any]:
    """Context that ``$(pipeline.<path>)$`` references resolve against."""
    return {"pipeline": pipeline.to_dict()}


# Token fragments the decoder stops on when the input is cut short:
# partial literals and the unparsed tail of a partial number.
_PARTIAL_TOKEN = re.compile(r"t(?:ru?)?|f(?:a(?:ls?)?)?|n(?:ul?)?|-|\.|[eE][+-]?|")


def _ran_out_of_input(text: str, error: json.JSONDecodeError) -> bool:
    if error.msg.startswith("Extra data"):
        return False
    if error.msg.startswith("Unterminated string"):
        return True
    return _PARTIAL_TOKEN.fullmatch(text[error.pos:].strip()) is not None


def decode_template(raw: bytes) -> dict[str, Any]:
    """Decode raw template bytes into a document.

    Raises:
        StampError: If the bytes are not a JSON object
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StampError(f"unmarshal to JSON: {e}") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        if _ran_out_of_input(text, e):
            raise StampError("unmarshal to JSON: unexpected end of JSON input") from e
        raise StampError(
            f"unmarshal to JSON: {e.msg} (line {e.lineno}, column {e.colno})"
        ) from e

    if not isinstance(document, dict):
        raise StampError("unmarshal to JSON: template must be a JSON object")
    return document


class Stamper:
    """Renders template documents against a templating context."""

    def __init__(
        self,
        context: dict[str, Any],
        labels: dict[str, str] | None = None,
        namespace: str | None = None,
    ) -> None:
        self.context = context
        self.labels = dict(labels or {})
        self.namespace = namespace

    @classmethod
    def for_pipeline(cls, pipeline: Pipeline, labels: dict[str, str] | None = None) -> Stamper:
        return cls(
            pipeline_templating_context(pipeline),
            labels=labels,
            namespace=pipeline.namespace or None,
        )

    def stamp(self, raw: bytes) -> dict[str, Any]:
        """Decode and render a raw template document.

        Raises:
            StampError: If the document cannot be decoded or contains an
                invalid reference
        """
        document = decode_template(raw)
        try:
            stamped = self.substitute(document)
        except PathSyntaxError as e:
            raise StampError(f"evaluate template: {e}") from e

        if self.labels:
            objects.set_labels(stamped, self.labels)
        if self.namespace and not objects.get_namespace(stamped):
            objects.metadata(stamped)["namespace"] = self.namespace
        return stamped

    def substitute(self, value: Any) -> Any:
        """Recursively resolve references in a value."""
        if isinstance(value, str):
            return self._substitute_string(value)
        elif isinstance(value, dict):
            return {k: self.substitute(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self.substitute(item) for item in value]
        else:
            return value

    def _lookup(self, path: str) -> Any:
        try:
            return copy.deepcopy(compile_path(path).evaluate(self.context))
        except PathNotFoundError:
            # Unresolved references render as null, never as an error
            return None

    def _substitute_string(self, text: str) -> Any:
        whole = REFERENCE_PATTERN.fullmatch(text)
        if whole:
            return self._lookup(whole.group(1))

        def replacer(match: re.Match) -> str:
            value = self._lookup(match.group(1))
            if value is None:
                return ""
            if isinstance(value, str):
                return value
            return json.dumps(value)

        return REFERENCE_PATTERN.sub(replacer, text)
