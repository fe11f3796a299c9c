"""Read and write pillar files.

Writes never leave a destination file partially written: the content goes
to a temporary file first and is only moved into place once it has been
copied completely.

"""

import os
import os.path
import shutil
import sys
import tempfile

from securepillar import ShortCopyError
from securepillar._output import output

STDIO = "-"


def short_file_name(path):
    cwd = os.getcwd()
    if path.startswith(cwd + os.sep):
        return path[len(cwd) + 1 :]
    return path


def read_sls_file(path) -> bytes:
    """Return the raw content of `path`.

    A missing file is created empty, along with its parent directories.

    """
    if path == STDIO:
        return sys.stdin.buffer.read()
    path = os.path.abspath(path)
    if not os.path.exists(path):
        os.makedirs(os.path.dirname(path), mode=0o700, exist_ok=True)
        os.close(os.open(path, os.O_RDONLY | os.O_CREAT, 0o600))
        output.annotate(
            f"created empty file: '{short_file_name(path)}'", debug=True
        )
    with open(path, "rb") as f:
        return f.read()


def write_sls_file(buffer: str, path) -> int:
    """Write `buffer` to `path` (or stdout) and return the byte count."""
    if path == STDIO:
        sys.stdout.write(buffer)
        if not buffer.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()
        return len(buffer.encode("utf-8"))
    path = os.path.abspath(path)
    os.makedirs(os.path.dirname(path), mode=0o700, exist_ok=True)
    byte_count = atomic_write(path, buffer.encode("utf-8"))
    output.annotate(f"wrote out to file: '{short_file_name(path)}'")
    return byte_count


def atomic_write(path, data: bytes) -> int:
    fd, tmp_name = tempfile.mkstemp(prefix=f"gsp-{os.path.basename(path)}")
    try:
        with os.fdopen(fd, "wb") as f:
            byte_count = f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, 0o600)
    except Exception:
        os.unlink(tmp_name)
        raise
    # If copying fails the temporary file stays around for recovery.
    copy_file(tmp_name, path)
    os.unlink(tmp_name)
    return byte_count


def copy_file(source, destination):
    """Copy `source` over `destination` via a staging file next to it."""
    expected = os.stat(source).st_size
    staging = tempfile.NamedTemporaryFile(
        dir=os.path.dirname(destination),
        prefix="." + os.path.basename(destination) + ".",
        delete=False,
    )
    try:
        with staging, open(source, "rb") as src:
            shutil.copyfileobj(src, staging)
            staging.flush()
            os.fsync(staging.fileno())
        copied = os.stat(staging.name).st_size
        if copied != expected:
            raise ShortCopyError.from_context(
                source, destination, copied, expected
            )
        os.chmod(staging.name, 0o600)
        os.replace(staging.name, destination)
    except Exception:
        if os.path.exists(staging.name):
            os.unlink(staging.name)
        raise
