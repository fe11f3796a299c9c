"""Apply an action to all pillar files below a directory."""

import os
import os.path
from concurrent.futures import ThreadPoolExecutor

from securepillar import ReportingException
from securepillar._output import output

from . import actions
from .document import dump
from .files import short_file_name, write_sls_file
from .sls import SlsFile


def find_sls_files(directory, extension=".sls"):
    directory = os.path.abspath(directory)
    result = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith(extension):
                result.append(os.path.join(dirpath, filename))
    return result


def process_file(path, action, pki, element=None):
    """Apply `action` to one file.

    Encrypt, decrypt and rotate update the file in place. For validate the
    key map is returned instead.

    """
    sls = SlsFile(path, pki, element)
    buffer = sls.perform_action(action)
    if action == actions.VALIDATE:
        return sls.key_map
    write_sls_file(buffer, path)
    return None


class BatchResult(object):
    def __init__(self):
        self.key_maps = {}
        self.errors = {}

    @property
    def failed(self):
        return len(self.errors)

    def report(self):
        return dump(self.key_maps) if self.key_maps else ""


def process_dir(
    directory, action, pki, element=None, extension=".sls", jobs=1
):
    """Process all matching files, continuing past per-file errors."""
    actions.check_action(action)
    files = find_sls_files(directory, extension)
    output.annotate(
        f"{action}: {len(files)} file(s) in {directory}", debug=True
    )

    def run(path):
        try:
            return path, process_file(path, action, pki, element), None
        except (ReportingException, OSError) as e:
            return path, None, e

    result = BatchResult()
    with ThreadPoolExecutor(max(jobs or 1, 1)) as pool:
        for path, key_map, error in pool.map(run, files):
            name = short_file_name(path)
            if error is not None:
                output.error(f"{name}: {error}")
                result.errors[name] = error
            elif key_map:
                result.key_maps[name] = key_map
    return result
