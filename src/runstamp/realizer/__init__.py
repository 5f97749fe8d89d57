"""Realization of pipelines against their RunTemplates."""

from runstamp.realizer.pipeline import (
    DEFAULT_LABEL_PREFIX,
    PipelineRealizer,
    RealizeResult,
    select_materialized,
)

__all__ = [
    "DEFAULT_LABEL_PREFIX",
    "PipelineRealizer",
    "RealizeResult",
    "select_materialized",
]
