import sys


class Output(object):
    """Manage the output of various parts of securepillar to achieve
    consistency wrt to formatting and display.
    """

    enable_debug = False

    def __init__(self, backend):
        self.backend = backend

    def line(self, message, debug=False, **format):
        if debug and not self.enable_debug:
            return
        self.backend.line(message, **format)

    def annotate(self, message, debug=False, **format):
        if debug and not self.enable_debug:
            return
        lines = message.split("\n")
        lines = [" " * 5 + line for line in lines]
        message = "\n".join(lines)
        self.line(message, **format)

    def tabular(self, key, value, separator=": ", debug=False, **kw):
        if debug and not self.enable_debug:
            return
        message = key.rjust(10) + separator + value
        self.annotate(message, **kw)

    def step(self, context, message, debug=False, **format):
        if debug and not self.enable_debug:
            return
        _format = {"bold": True}
        _format.update(format)
        self.line("{}: {}".format(context, message), **_format)

    def error(self, message, debug=False):
        if debug and not self.enable_debug:
            return
        self.step("ERROR", message, red=True)


class TerminalBackend(object):
    def __init__(self, file=None):
        import py.io

        self._tw = py.io.TerminalWriter(file or sys.stderr)

    def line(self, message, **format):
        self._tw.line(message, **format)


class NullBackend(object):
    def line(self, message, **format):
        pass


class TestBackend(object):
    """Collect output for assertions in tests."""

    __test__ = False

    def __init__(self):
        self.output = ""

    def line(self, message, **format):
        self.output += message + "\n"


output = Output(NullBackend())
