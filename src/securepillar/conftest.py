import base64
import os

import pytest

from securepillar import DecryptError, EncryptError
from securepillar.actions import PGP_HEADER

PGP_FOOTER = "-----END PGP MESSAGE-----"


class FakePki(object):
    """Reversible stand-in for the GnuPG backend.

    "Ciphertext" names the key it was made for, and can only be decrypted
    if that key is in `secret_keys`.

    """

    def __init__(self, key_name="K1", secret_keys=None):
        self.key_name = key_name
        self.secret_keys = set(secret_keys or [key_name])
        self.calls = []

    def encrypt(self, plaintext):
        self.calls.append(("encrypt", plaintext))
        if not self.key_name:
            raise EncryptError.from_context(
                ["gpg", "--encrypt"], 2, b"no key"
            )
        payload = base64.b64encode(plaintext.encode("utf-8")).decode("ascii")
        return f"{PGP_HEADER}\n\n{self.key_name}:{payload}\n{PGP_FOOTER}\n"

    def _parse(self, ciphertext):
        body = ciphertext.split(PGP_HEADER, 1)[1].strip()
        line = body.splitlines()[0]
        key, payload = line.split(":", 1)
        return key, payload

    def decrypt(self, ciphertext):
        self.calls.append(("decrypt", ciphertext))
        try:
            key, payload = self._parse(ciphertext)
        except (IndexError, ValueError):
            raise DecryptError.from_context(
                ["gpg", "--decrypt"], 2, b"no valid OpenPGP data found"
            )
        if key not in self.secret_keys:
            raise DecryptError.from_context(
                ["gpg", "--decrypt"], 2, b"decryption failed: No secret key"
            )
        return base64.b64decode(payload).decode("utf-8")

    def key_info(self, ciphertext):
        self.calls.append(("key_info", ciphertext))
        return self._parse(ciphertext)[0]


@pytest.fixture
def pki():
    return FakePki()


@pytest.fixture(autouse=True)
def output(monkeypatch):
    from securepillar import output
    from securepillar._output import TestBackend

    backend = TestBackend()
    monkeypatch.setattr(output, "backend", backend)
    monkeypatch.setattr(output, "enable_debug", False)
    return output


@pytest.fixture(autouse=True)
def ensure_workingdir(request):
    working_dir = os.getcwd()
    yield
    os.chdir(working_dir)
