"""
runstamp - realize RunTemplates for pipelines.

Stamps a RunTemplate with a pipeline's fields, makes sure the stamped object
exists exactly once in the resource store, and reads named outputs back from
the materialized object.
"""

from runstamp.models import (
    Condition,
    ConditionStatus,
    Pipeline,
    PipelineSpec,
    Reason,
    RunTemplate,
    TemplateReference,
)
from runstamp.realizer import PipelineRealizer
from runstamp.repository import InMemoryRepository, Repository
from runstamp.templates import RunTemplateModel, Stamper, extract_outputs

__version__ = "0.1.0"

__all__ = [
    "Condition",
    "ConditionStatus",
    "InMemoryRepository",
    "Pipeline",
    "PipelineRealizer",
    "PipelineSpec",
    "Reason",
    "Repository",
    "RunTemplate",
    "RunTemplateModel",
    "Stamper",
    "TemplateReference",
    "extract_outputs",
]
