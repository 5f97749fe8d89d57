"""
RunTemplate handling: the template model, stamping and output extraction.
"""

from runstamp.templates.outputs import Outputs, extract_outputs, outputs_to_json
from runstamp.templates.run_template import RunTemplateModel
from runstamp.templates.stamper import Stamper, decode_template, pipeline_templating_context

__all__ = [
    "Outputs",
    "RunTemplateModel",
    "Stamper",
    "decode_template",
    "extract_outputs",
    "outputs_to_json",
    "pipeline_templating_context",
]
