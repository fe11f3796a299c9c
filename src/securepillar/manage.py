import sys

from . import actions
from .batch import process_dir
from .files import STDIO, write_sls_file
from .sls import SlsFile


def _print(buffer):
    if buffer:
        sys.stdout.write(buffer)
        sys.stdout.flush()


def create(pki, element, names, values, outfile=STDIO, **kw):
    """Create a new sls file holding the given secrets."""
    sls = SlsFile(None, pki, element)
    buffer = sls.process_secrets(names, values)
    write_sls_file(buffer, outfile)
    return 0


def update(pki, element, names, values, file=STDIO, **kw):
    """Add or replace secrets in an existing sls file."""
    sls = SlsFile(file, pki, element)
    buffer = sls.process_secrets(names, values)
    write_sls_file(buffer, file)
    return 0


def all_values(
    action, pki, element, file=STDIO, outfile=STDIO, update=False, **kw
):
    """Apply `action` to every value of a single file."""
    sls = SlsFile(file, pki, element)
    buffer = sls.perform_action(action)
    if action == actions.VALIDATE:
        _print(buffer)
        return 0
    if update and file != STDIO:
        outfile = file
    write_sls_file(buffer, outfile)
    return 0


def recurse(action, pki, element, dir, jobs=1, extension=".sls", **kw):
    """Apply `action` to all sls files below `dir`."""
    result = process_dir(
        dir, action, pki, element=element, extension=extension, jobs=jobs
    )
    if action == actions.VALIDATE:
        _print(result.report())
    return 1 if result.failed else 0


def path(action, pki, element, path, file=STDIO, outfile=None, **kw):
    """Apply `action` to the value at a single path.

    Encrypted values are written back to the input file by default,
    decrypted ones are printed.

    """
    sls = SlsFile(file, pki, element)
    buffer = sls.path_action(path, action)
    if action == actions.VALIDATE:
        _print(buffer)
        return 0
    if outfile is None:
        if action == actions.DECRYPT or file == STDIO:
            outfile = STDIO
        else:
            outfile = file
    write_sls_file(buffer, outfile)
    return 0


def rotate(
    pki,
    element,
    file=None,
    dir=None,
    outfile=STDIO,
    jobs=1,
    extension=".sls",
    **kw
):
    """Re-encrypt a file or a directory with the current key."""
    if file:
        return all_values(
            actions.ROTATE, pki, element, file=file, outfile=outfile
        )
    return recurse(
        actions.ROTATE, pki, element, dir, jobs=jobs, extension=extension
    )
