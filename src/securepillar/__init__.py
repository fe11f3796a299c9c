import os.path

from ._output import output

with open(os.path.dirname(__file__) + "/version.txt") as f:
    __version__ = f.read().strip()


class ReportingException(Exception):
    """Exceptions that support user-readable reporting."""

    def __str__(self):
        raise NotImplementedError()

    def report(self):
        raise NotImplementedError()


class ParseError(ReportingException):
    """A pillar document could not be parsed as YAML."""

    filename: str
    error: str

    @classmethod
    def from_context(cls, filename, error):
        self = cls()
        self.filename = filename
        self.error = str(error)
        return self

    def __str__(self):
        return f"Unable to parse {self.filename}: {self.error}"

    def report(self):
        output.error("Unable to parse document")
        output.tabular("file", self.filename, red=True)
        output.tabular("message", self.error, separator=":\n")


class IncludeDetectedError(ReportingException):
    """A pillar document contains include directives."""

    filename: str
    lineno: int

    @classmethod
    def from_context(cls, filename, lineno):
        self = cls()
        self.filename = filename
        self.lineno = lineno
        return self

    def __str__(self):
        return (
            f"{self.filename} contains include directives "
            f"(line {self.lineno})"
        )

    def report(self):
        output.error(str(self))


class EmptyDocumentError(ReportingException):
    """There is nothing to serialize."""

    filename: str

    @classmethod
    def from_context(cls, filename):
        self = cls()
        self.filename = filename
        return self

    def __str__(self):
        return f"{self.filename} has no values to format"

    def report(self):
        output.error(str(self))


class PathConflictError(ReportingException):
    """A path can not be followed through a non-mapping value."""

    path: str
    segment: str
    reason: str

    @classmethod
    def from_context(cls, path, segment, reason="does not hold a mapping"):
        self = cls()
        self.path = path
        self.segment = segment
        self.reason = reason
        return self

    def __str__(self):
        return f"Cannot use path `{self.path}`: `{self.segment}` {self.reason}"

    def report(self):
        output.error(str(self))


class PathNotFoundError(ReportingException):
    """There is no value at the given path."""

    path: str

    @classmethod
    def from_context(cls, path):
        self = cls()
        self.path = path
        return self

    def __str__(self):
        return f"No value found at path `{self.path}`"

    def report(self):
        output.error(str(self))


class NotEncryptedError(ReportingException):
    """A value that must be encrypted is plaintext."""

    path: str

    @classmethod
    def from_context(cls, path=None):
        self = cls()
        self.path = path
        return self

    def __str__(self):
        if self.path:
            return f"value is not encrypted: {self.path}"
        return "value is not encrypted"

    def report(self):
        output.error(str(self))


class GPGCallError(ReportingException):
    """There was an error calling GPG."""

    command: str
    exitcode: str
    output: str

    @classmethod
    def from_context(cls, command, exitcode, output):
        self = cls()
        self.command = " ".join(command)
        self.exitcode = str(exitcode)
        if isinstance(output, bytes):
            output = output.decode("ascii", errors="replace")
        self.output = output
        return self

    def __str__(self):
        return (
            f"Exitcode {self.exitcode} while calling: "
            f"{self.command}\n{self.output}"
        )

    def report(self):
        output.error("Error while calling GPG")
        output.tabular("command", self.command, red=True)
        output.tabular("exit code", self.exitcode)
        output.tabular("message", self.output, separator=":\n")


class EncryptError(GPGCallError):
    """Encrypting a value failed."""

    def report(self):
        output.error("Error while encrypting value")
        output.tabular("command", self.command, red=True)
        output.tabular("exit code", self.exitcode)
        output.tabular("message", self.output, separator=":\n")


class DecryptError(GPGCallError):
    """Decrypting a value failed."""

    def __str__(self):
        return "error decrypting value: " + super().__str__()

    def report(self):
        output.error("Error while decrypting value")
        output.tabular("command", self.command, red=True)
        output.tabular("exit code", self.exitcode)
        output.tabular("message", self.output, separator=":\n")


class ShortCopyError(ReportingException):
    """Not all bytes made it from the temporary file to the destination."""

    source: str
    destination: str
    copied: int
    expected: int

    @classmethod
    def from_context(cls, source, destination, copied, expected):
        self = cls()
        self.source = source
        self.destination = destination
        self.copied = copied
        self.expected = expected
        return self

    def __str__(self):
        return (
            f"{self.source}: {self.copied}/{self.expected} copied "
            f"to {self.destination}"
        )

    def report(self):
        output.error("Incomplete write")
        output.tabular("file", self.destination, red=True)
        output.tabular("copied", f"{self.copied}/{self.expected} bytes")
        output.tabular("kept", self.source)


class UnknownActionError(ReportingException):
    """An action name is not one of encrypt, decrypt, validate, rotate."""

    action: str

    @classmethod
    def from_context(cls, action):
        self = cls()
        self.action = action
        return self

    def __str__(self):
        return f"Unknown action `{self.action}`"

    def report(self):
        output.error(str(self))


class ConfigurationError(ReportingException):
    """The profile configuration could not be used."""

    filename: str
    message: str

    @classmethod
    def from_context(cls, filename, message):
        self = cls()
        self.filename = filename
        self.message = str(message)
        return self

    def __str__(self):
        return f"Unable to use {self.filename}: {self.message}"

    def report(self):
        output.error("Invalid configuration")
        output.tabular("file", self.filename, red=True)
        output.tabular("message", self.message, separator=":\n")
