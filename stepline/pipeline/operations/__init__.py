"""
Pipeline operations for text transformation.

Each operation takes a PipelineRun and the Step being executed, transforms
the run's current content and records the result on the run.
"""

from stepline.pipeline.operations.compression import compress_gzip_op
from stepline.pipeline.operations.compression import compress_zip_op
from stepline.pipeline.operations.compression import decompress_gzip_op
from stepline.pipeline.operations.compression import decompress_zip_op
from stepline.pipeline.operations.crypto import decrypt_aes_op
from stepline.pipeline.operations.crypto import encrypt_aes_op
from stepline.pipeline.operations.encoding import decode_base64_op
from stepline.pipeline.operations.encoding import decode_url_op
from stepline.pipeline.operations.encoding import encode_base64_op
from stepline.pipeline.operations.encoding import encode_url_op
from stepline.pipeline.operations.extract import extract_json_op
from stepline.pipeline.operations.extract import extract_xml_op

__all__ = [
    "decode_base64_op",
    "encode_base64_op",
    "decompress_gzip_op",
    "compress_gzip_op",
    "decompress_zip_op",
    "compress_zip_op",
    "extract_xml_op",
    "extract_json_op",
    "encode_url_op",
    "decode_url_op",
    "encrypt_aes_op",
    "decrypt_aes_op",
]
