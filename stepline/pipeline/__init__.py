"""
Pipeline package for step-by-step text transformation.

This package implements the operations a step can perform:
- encoding: Base64 and URL encoding/decoding
- compression: gzip and ZIP, carried between steps as Base64
- extract: XML tag and JSON path extraction
- crypto: AES encryption and decryption
"""

from stepline.pipeline.context import PipelineRun
from stepline.pipeline.executor import OPERATIONS
from stepline.pipeline.executor import Pipeline
from stepline.pipeline.executor import run_pipeline

__all__ = ["OPERATIONS", "Pipeline", "PipelineRun", "run_pipeline"]
