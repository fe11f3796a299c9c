import copy
import os.path

from securepillar import PathConflictError, PathNotFoundError
from securepillar._output import output

from . import actions
from .document import format_buffer, parse
from .files import STDIO, read_sls_file, short_file_name
from .path import get_path, join_path, set_path, split_path


class SlsFile(object):
    """A pillar document and the secrets it holds.

    `element` restricts whole-document actions to a single top-level key.

    """

    def __init__(self, file_path, pki, element=None):
        self.file_path = file_path
        self.pki = pki
        self.element = element or None
        self.document = {}
        self.key_map = {}
        if file_path:
            self.read()

    @property
    def name(self):
        if not self.file_path or self.file_path == STDIO:
            return "<stdin>"
        return short_file_name(os.path.abspath(self.file_path))

    def read(self):
        self.read_bytes(read_sls_file(self.file_path))

    def read_bytes(self, data):
        self.document = parse(data, self.name)

    def format_buffer(self, action=None) -> str:
        if action == actions.VALIDATE:
            return format_buffer(self.key_map, header=False, filename=self.name)
        return format_buffer(self.document, filename=self.name)

    def process_values(self, value, action, path=()):
        """Return `value` with `action` applied to every string in it.

        The input is left untouched.

        """
        if isinstance(value, str):
            return actions.apply(self.pki, action, value, join_path(path))
        elif isinstance(value, list):
            return [
                self.process_values(item, action, path + (i,))
                for i, item in enumerate(value)
            ]
        elif isinstance(value, dict):
            return {
                key: self.process_values(item, action, path + (key,))
                for key, item in value.items()
            }
        # None, numbers, booleans and dates are not secrets.
        return value

    def collect_keys(self, value, path=(), result=None):
        """Map the path of every encrypted string to its key identity."""
        if result is None:
            result = {}
        if isinstance(value, str):
            if actions.is_encrypted(value):
                result[join_path(path)] = self.pki.key_info(value)
        elif isinstance(value, list):
            for i, item in enumerate(value):
                self.collect_keys(item, path + (i,), result)
        elif isinstance(value, dict):
            for key, item in value.items():
                self.collect_keys(item, path + (key,), result)
        return result

    def _in_scope(self, key):
        return self.element is None or key == self.element

    def perform_action(self, action) -> str:
        """Apply `action` to all values in scope and return the result."""
        actions.check_action(action)
        output.annotate(f"{self.name}: {action}", debug=True)

        if action == actions.VALIDATE:
            key_map = {}
            for key, value in self.document.items():
                if self._in_scope(key):
                    self.collect_keys(value, (key,), key_map)
            self.key_map = key_map
            if not key_map:
                output.annotate(f"{self.name}: no encrypted values found")
                return ""
            return self.format_buffer(action)

        document = {}
        for key, value in self.document.items():
            if self._in_scope(key):
                document[key] = self.process_values(value, action, (key,))
            else:
                document[key] = value
        self.document = document
        return self.format_buffer(action)

    def path_action(self, path, action) -> str:
        """Apply `action` to the single value at `path`."""
        actions.check_action(action)
        output.annotate(f"{self.name}: {action} {path}", debug=True)
        parts = split_path(path)
        value = get_path(self.document, parts)
        if value is None:
            raise PathNotFoundError.from_context(path)
        if not isinstance(value, str):
            raise PathConflictError.from_context(
                path, path, "does not hold a scalar value"
            )

        # Unlike perform_action, plaintext is an error here.
        result = actions.apply(self.pki, action, value, path)
        if action == actions.VALIDATE:
            self.key_map = {path: result}
            return self.format_buffer(action)

        document = copy.deepcopy(self.document)
        set_path(document, parts, result)
        self.document = document
        return self.format_buffer(action)

    def process_secrets(self, names, values) -> str:
        """Encrypt `values` and store them at the paths given in `names`."""
        if len(names) != len(values):
            raise ValueError(
                f"Got {len(names)} secret name(s) "
                f"but {len(values)} value(s)."
            )
        document = copy.deepcopy(self.document)
        for name, value in zip(names, values):
            set_path(
                document,
                split_path(name),
                actions.encrypt_value(self.pki, value),
            )
        self.document = document
        return self.format_buffer()
