"""
stepline: run text through an ordered pipeline of transformation steps.

Steps decode and encode Base64 and URL text, compress and decompress gzip
and ZIP payloads, extract values from XML and JSON, and encrypt or decrypt
with AES. Every step's result is kept, including when a later step fails.
"""

from stepline.models import OperationKind
from stepline.models import Step
from stepline.models import StepResult
from stepline.models import new_step
from stepline.pipeline import Pipeline
from stepline.pipeline import PipelineRun
from stepline.pipeline import run_pipeline

__version__ = "0.1.0"

__all__ = [
    "OperationKind",
    "Pipeline",
    "PipelineRun",
    "Step",
    "StepResult",
    "new_step",
    "run_pipeline",
]
