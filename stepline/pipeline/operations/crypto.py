"""
AES operations for the pipeline.

Handles symmetric encryption with per-step cipher settings:
- encrypt-aes: plaintext -> Base64 or hex ciphertext
- decrypt-aes: Base64 or hex ciphertext -> plaintext

The secret key and IV are used as their literal UTF-8 bytes. Padding is
applied in every mode, stream modes included.
"""

from __future__ import annotations

import binascii
import logging
from typing import TYPE_CHECKING

from cryptography.hazmat.decrepit.ciphers.modes import CFB
from cryptography.hazmat.decrepit.ciphers.modes import OFB
from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers import modes

from stepline.errors import CryptoOperationFailure
from stepline.errors import InvalidInputEncoding
from stepline.errors import MissingCryptoParameter
from stepline.models import CipherMode
from stepline.models import OutputFormat
from stepline.models import Padding
from stepline.pipeline.operations.encoding import b64decode_strict
from stepline.pipeline.operations.encoding import b64encode_text

if TYPE_CHECKING:
    from stepline.models import Step
    from stepline.pipeline.context import PipelineRun

logger = logging.getLogger(__name__)

BLOCK_SIZE = 16  # bytes
IV_SIZE = 16  # bytes
KEY_LENGTHS = (16, 24, 32)  # bytes

_MODES = {
    CipherMode.CBC: modes.CBC,
    CipherMode.CFB: CFB,
    CipherMode.OFB: OFB,
    CipherMode.CTR: modes.CTR,
}


def encrypt_aes_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, encrypt_aes(run.current, step))
    return run


def decrypt_aes_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, decrypt_aes(run.current, step))
    return run


# =============================================================================
# Parameters
# =============================================================================


def _parse_enum(enum_cls, value: str, label: str):  # noqa: ANN001, ANN202
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise CryptoOperationFailure(
            f"Unsupported {label} '{value}' (expected one of: {choices})"
        ) from None


def _key_bytes(step: Step) -> bytes:
    if not step.secret_key:
        raise MissingCryptoParameter("Secret key is required for AES operations")

    key = step.secret_key.encode("utf-8")
    if len(key) not in KEY_LENGTHS:
        raise CryptoOperationFailure(
            f"Secret key must be 16, 24 or 32 bytes long, got {len(key)}"
        )

    # key_size is informational: the key length decides the AES variant.
    if len(key) * 8 != step.effective_key_size:
        logger.warning(
            f"Step {step.id}: key size is set to {step.effective_key_size} bits "
            f"but the secret key is {len(key) * 8} bits; using the key as given"
        )
    return key


def _build_cipher(step: Step) -> tuple[Cipher, Padding]:
    mode = _parse_enum(CipherMode, step.effective_cipher_mode, "cipher mode")
    pad = _parse_enum(Padding, step.effective_padding, "padding")
    key = _key_bytes(step)

    if not mode.requires_iv:
        return Cipher(algorithms.AES(key), modes.ECB()), pad

    if not step.iv:
        raise MissingCryptoParameter(f"Initialization vector is required for {mode.value} mode")

    iv = step.iv.encode("utf-8")
    if len(iv) != IV_SIZE:
        raise CryptoOperationFailure(
            f"Initialization vector must be {IV_SIZE} bytes long, got {len(iv)}"
        )
    return Cipher(algorithms.AES(key), _MODES[mode](iv)), pad


# =============================================================================
# Padding
# =============================================================================


def _pad(data: bytes, pad: Padding) -> bytes:
    if pad is Padding.PKCS5:
        padder = sym_padding.PKCS7(BLOCK_SIZE * 8).padder()
        return padder.update(data) + padder.finalize()
    if pad is Padding.ZERO:
        remainder = len(data) % BLOCK_SIZE
        if remainder:
            data += b"\x00" * (BLOCK_SIZE - remainder)
    return data


def _unpad(data: bytes, pad: Padding) -> bytes:
    if pad is Padding.PKCS5:
        unpadder = sym_padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            return unpadder.update(data) + unpadder.finalize()
        except ValueError as e:
            raise CryptoOperationFailure(
                "Decryption failed: bad padding (wrong key, IV or cipher settings?)"
            ) from e
    if pad is Padding.ZERO:
        return data.rstrip(b"\x00")
    return data


# =============================================================================
# Encrypt / decrypt
# =============================================================================


def _run_cipher(context, data: bytes) -> bytes:  # noqa: ANN001
    try:
        return context.update(data) + context.finalize()
    except ValueError as e:
        raise CryptoOperationFailure(f"AES operation failed: {e}") from e


def encrypt_aes(text: str, step: Step) -> str:
    """Encrypt `text` with the step's AES settings."""
    cipher, pad = _build_cipher(step)
    output_format = _parse_enum(OutputFormat, step.effective_output_format, "output format")

    try:
        plaintext = text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidInputEncoding(f"Cannot encode input as UTF-8: {e}") from e

    ciphertext = _run_cipher(cipher.encryptor(), _pad(plaintext, pad))

    if output_format is OutputFormat.HEX:
        return ciphertext.hex()
    return b64encode_text(ciphertext)


def _parse_ciphertext(text: str, output_format: OutputFormat) -> bytes:
    if output_format is OutputFormat.HEX:
        try:
            return binascii.unhexlify(text.strip())
        except (binascii.Error, ValueError) as e:
            raise InvalidInputEncoding(f"Ciphertext is not valid hex: {e}") from e
    return b64decode_strict(text.strip())


def decrypt_aes(text: str, step: Step) -> str:
    """Decrypt `text` with the step's AES settings."""
    cipher, pad = _build_cipher(step)
    output_format = _parse_enum(OutputFormat, step.effective_output_format, "output format")

    ciphertext = _parse_ciphertext(text, output_format)
    plaintext = _unpad(_run_cipher(cipher.decryptor(), ciphertext), pad)

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CryptoOperationFailure(
            "Decryption produced invalid UTF-8 (wrong key, IV or cipher settings?)"
        ) from e
