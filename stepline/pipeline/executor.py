"""
Pipeline executor that runs text through a series of steps.

The Pipeline class:
1. Takes an ordered list of Step records
2. Dispatches each step to its operation handler, in order
3. Passes a PipelineRun through each stage, recording every result
4. Stops at the first failing step, keeping the results before it
"""

from __future__ import annotations

import logging
from typing import Callable
from typing import Iterable

from stepline.errors import EmptyPipeline
from stepline.errors import StepError
from stepline.errors import UnknownOperationKind
from stepline.models import OperationKind
from stepline.models import Step
from stepline.pipeline.context import PipelineRun
from stepline.pipeline.operations import compress_gzip_op
from stepline.pipeline.operations import compress_zip_op
from stepline.pipeline.operations import decode_base64_op
from stepline.pipeline.operations import decode_url_op
from stepline.pipeline.operations import decompress_gzip_op
from stepline.pipeline.operations import decompress_zip_op
from stepline.pipeline.operations import decrypt_aes_op
from stepline.pipeline.operations import encode_base64_op
from stepline.pipeline.operations import encode_url_op
from stepline.pipeline.operations import encrypt_aes_op
from stepline.pipeline.operations import extract_json_op
from stepline.pipeline.operations import extract_xml_op

logger = logging.getLogger(__name__)


# Operation registry: kind -> handler function
OPERATIONS: dict[OperationKind, Callable[[PipelineRun, Step], PipelineRun]] = {
    OperationKind.DECODE_BASE64: decode_base64_op,
    OperationKind.ENCODE_BASE64: encode_base64_op,
    OperationKind.DECOMPRESS_GZIP: decompress_gzip_op,
    OperationKind.COMPRESS_GZIP: compress_gzip_op,
    OperationKind.DECOMPRESS_ZIP: decompress_zip_op,
    OperationKind.COMPRESS_ZIP: compress_zip_op,
    OperationKind.EXTRACT_XML: extract_xml_op,
    OperationKind.EXTRACT_JSON: extract_json_op,
    OperationKind.ENCODE_URL: encode_url_op,
    OperationKind.DECODE_URL: decode_url_op,
    OperationKind.ENCRYPT_AES: encrypt_aes_op,
    OperationKind.DECRYPT_AES: decrypt_aes_op,
}


def get_handler(step: Step) -> Callable[[PipelineRun, Step], PipelineRun]:
    """Look up the handler for a step, failing on unknown operations."""
    kind = step.kind
    handler = OPERATIONS.get(kind) if kind is not None else None
    if handler is None:
        raise UnknownOperationKind(f"Unknown processing step type: {step.type}")
    return handler


class Pipeline:
    """
    Executes an ordered list of steps on input text.

    Each step consumes the previous step's output. Steps are never modified.
    A run either completes every step or stops at the first failure; in
    both cases every completed step's result is kept on the PipelineRun.
    """

    def __init__(self, steps: Iterable[Step]):
        """
        Initialize pipeline with steps.

        Args:
            steps: Steps in execution order, e.g.:
                [
                    Step(id="1", type="decode-base64"),
                    Step(id="2", type="decompress-gzip"),
                    Step(id="3", type="extract-xml", xml_tag="message"),
                ]
        """
        self.steps: list[Step] = list(steps)

    def execute(self, content: str) -> PipelineRun:
        """
        Run every step on `content`.

        Args:
            content: Input text for the first step

        Returns:
            PipelineRun with the intermediate results and, on failure, the
            index, step and message of the failing step

        Raises:
            EmptyPipeline: if the pipeline has no steps
        """
        if not self.steps:
            raise EmptyPipeline("Please add at least one processing step")

        run = PipelineRun(input=content)

        for index, step in enumerate(self.steps):
            logger.debug(f"Step {index + 1}/{len(self.steps)}: {step.type} ({step.id})")
            try:
                handler = get_handler(step)
                run = handler(run, step)

            except StepError as e:
                run.set_error(str(e), type(e).__name__, index, step)

            except Exception as e:
                logger.error(f"Pipeline step '{step.type}' failed unexpectedly: {e}")
                run.set_error(f"{step.type} failed: {e}", StepError.__name__, index, step)

            # Stop pipeline if error occurred
            if run.has_error():
                logger.warning(f"Pipeline stopped at step {index + 1} ({step.type}): {run.error}")
                break

        return run

    @classmethod
    def from_definition(cls, definition: dict) -> Pipeline:
        """
        Create a Pipeline from a pipeline definition.

        Args:
            definition: Dict with a 'steps' list of serialized steps

        Returns:
            Pipeline instance
        """
        return cls(Step.from_dict(item) for item in definition.get("steps", []))


def run_pipeline(content: str, steps: Iterable[Step]) -> PipelineRun:
    """
    Convenience function to run steps on content.

    Args:
        content: Input text
        steps: Steps in execution order

    Returns:
        PipelineRun with results and error state
    """
    pipeline = Pipeline(steps)
    return pipeline.execute(content)
