"""
File-system convenience wrappers around the envelope engine.

Output files are never written in place. Content goes to a staging file
(in the context's temp directory when one is given, otherwise next to the
target), is flushed and fsynced, and is renamed onto the target only after
the whole operation succeeded. A failed encryption or decryption leaves no
target file behind. OS errors are not retried and propagate unchanged.
"""

from __future__ import annotations

import contextlib
import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..memory import SecretBuffer
from ..security import sealer, stream
from ..security.keys import AsymmetricKeypair, PUBLIC_KEY_SIZE
from ..security.rng import generate_dek
from ..utils import ensure_bytes
from .envelope import decrypt_file, decrypt_file_with_dek, encrypt_file
from .hashing import fingerprint
from .models import AsymmetricWrap, EncryptedFile, StreamedFile, sealed_bytes

logger = logging.getLogger(__name__)

STAGING_SUFFIX = ".part"


def _unlink_missing_ok(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def _new_staging_path(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(dir=directory, prefix=".kv-", suffix=STAGING_SUFFIX)
    os.close(fd)
    return Path(name)


def _commit(staged: Path, target: Path) -> None:
    try:
        os.replace(staged, target)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        # staging dir is on another filesystem: copy next to the target, then rename
        local = _new_staging_path(target.parent)
        try:
            shutil.copyfile(staged, local)
            os.replace(local, target)
        except BaseException:
            _unlink_missing_ok(local)
            raise
        _unlink_missing_ok(staged)


@contextlib.contextmanager
def staged_output(target, ctx=None):
    """
    Yield a binary file object whose content lands at ``target`` on success.

    ``ctx`` is an optional :class:`~kryptvault.context.VaultContext`; its lock
    is held while its staging directory is in use.
    """
    target = Path(target)
    lock = ctx.temp_lock if ctx is not None else contextlib.nullcontext()
    with lock:
        staging_dir = ctx.temp_dir if ctx is not None else target.parent
        staged = _new_staging_path(Path(staging_dir))
        try:
            with open(staged, "wb") as f:
                yield f
                f.flush()
                os.fsync(f.fileno())
            _commit(staged, target)
        except BaseException:
            _unlink_missing_ok(staged)
            raise


def atomic_write(target, data: bytes, ctx=None) -> Path:
    with staged_output(target, ctx) as f:
        f.write(data)
    return Path(target)


def encrypt_path(in_path, out_path, recipient_public_key: bytes, ctx=None) -> EncryptedFile:
    """Encrypt the file at ``in_path`` and write the raw ciphertext to ``out_path``."""
    src = Path(in_path).expanduser()
    result = encrypt_file(src.read_bytes(), recipient_public_key, original_name=src.name or "unknown")
    atomic_write(Path(out_path).expanduser(), result.ciphertext, ctx)
    logger.debug("Wrote ciphertext for %r (sha256=%s)", result.original_name, result.ciphertext_sha256())
    return result


def decrypt_path(in_path, out_path, wrapped_dek, nonce: bytes, keypair: AsymmetricKeypair, ctx=None) -> Path:
    """Decrypt the ciphertext file at ``in_path`` into ``out_path``."""
    ciphertext = Path(in_path).expanduser().read_bytes()
    plaintext = decrypt_file(ciphertext, wrapped_dek, nonce, keypair.public_key, keypair.private_key)
    return atomic_write(Path(out_path).expanduser(), plaintext, ctx)


def decrypt_path_with_dek(in_path, out_path, dek: bytes, nonce: bytes, ctx=None) -> Path:
    ciphertext = Path(in_path).expanduser().read_bytes()
    plaintext = decrypt_file_with_dek(ciphertext, dek, nonce)
    return atomic_write(Path(out_path).expanduser(), plaintext, ctx)


def encrypt_path_stream(in_path, out_path, recipient_public_key: bytes, ctx=None) -> StreamedFile:
    """Chunked variant of :func:`encrypt_path` for files that should not be buffered."""
    recipient_public_key = ensure_bytes(recipient_public_key, "recipient public key", PUBLIC_KEY_SIZE)
    chunk_size = ctx.config.chunk_size if ctx is not None else stream.DEFAULT_CHUNK_SIZE
    src = Path(in_path).expanduser()
    target = Path(out_path).expanduser()

    with SecretBuffer(generate_dek()) as dek:
        wrapped = sealer.wrap(dek, recipient_public_key)
        with open(src, "rb") as inf, staged_output(target, ctx) as outf:
            plaintext_size = stream.encrypt_stream(inf, outf, dek, chunk_size=chunk_size)

    logger.info("Stream-encrypted %r for %s", src.name, fingerprint(recipient_public_key))
    return StreamedFile(
        wrapped_dek=AsymmetricWrap(wrapped),
        plaintext_size=plaintext_size,
        size=target.stat().st_size,
        original_name=src.name or "unknown",
    )


def decrypt_path_stream(in_path, out_path, wrapped_dek, keypair: AsymmetricKeypair, ctx=None) -> Path:
    """Decrypt a stream container; ``out_path`` appears only if every chunk verified."""
    sealed = sealed_bytes(wrapped_dek)
    target = Path(out_path).expanduser()
    with SecretBuffer(sealer.unwrap(sealed, keypair.public_key, keypair.private_key)) as dek:
        with open(Path(in_path).expanduser(), "rb") as inf, staged_output(target, ctx) as outf:
            stream.decrypt_stream(inf, outf, dek)
    return target
