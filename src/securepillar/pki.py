"""Encrypt, decrypt and inspect values with the GnuPG command line tool."""

import os
import re
import subprocess
import tempfile
from typing import List, Optional

from securepillar import DecryptError, EncryptError, GPGCallError
from securepillar._output import output

KEYID_PATTERN = re.compile(r"^:pubkey enc packet:.*\bkeyid ([0-9A-Fa-f]+)")


class Pki(object):
    """Key backend shelling out to `gpg`.

    Every call spawns its own process, so a single instance can be used
    from several threads at once.

    """

    _gpg = None
    GPG_BINARY_CANDIDATES = ["gpg", "gpg2"]

    def __init__(
        self,
        key_name: Optional[str] = None,
        gnupg_home: Optional[str] = None,
        pub_ring: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.key_name = key_name
        self.gnupg_home = (
            os.path.expanduser(gnupg_home) if gnupg_home else None
        )
        self.pub_ring = os.path.expanduser(pub_ring) if pub_ring else None
        self.timeout = timeout

    @classmethod
    def gpg(cls):
        if cls._gpg is not None:
            return cls._gpg
        with tempfile.TemporaryFile() as null:
            for gpg in cls.GPG_BINARY_CANDIDATES:
                args = [gpg, "--version"]
                output.annotate(f"Running `{args}`", debug=True)
                try:
                    subprocess.check_call(args, stdout=null, stderr=null)
                except (subprocess.CalledProcessError, OSError):
                    pass
                else:
                    cls._gpg = gpg
                    return cls._gpg
        raise GPGCallError.from_context(
            ["gpg", "--version"],
            "-",
            "Could not find gpg binary."
            " Is GPG installed? I tried looking for: {}".format(
                ", ".join("`{}`".format(x) for x in cls.GPG_BINARY_CANDIDATES)
            ),
        )

    def _args(self, *args) -> List[str]:
        result = [self.gpg(), "--batch", "--yes"]
        if self.gnupg_home:
            result.extend(["--homedir", self.gnupg_home])
        if self.pub_ring:
            result.extend(["--keyring", self.pub_ring])
        result.extend(args)
        return result

    def _run(self, args, input: str, error_class=GPGCallError) -> str:
        output.annotate(f"Running `{args}`", debug=True)
        try:
            p = subprocess.run(
                args,
                input=input.encode("utf-8"),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            raise error_class.from_context(
                e.cmd, e.returncode, e.stderr
            ) from e
        except subprocess.TimeoutExpired as e:
            raise error_class.from_context(
                e.cmd, "-", f"timed out after {e.timeout}s"
            ) from e
        try:
            return p.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise error_class.from_context(
                args, p.returncode, f"output is not valid UTF-8: {e}"
            ) from e

    def encrypt(self, plaintext: str) -> str:
        if not self.key_name:
            raise EncryptError.from_context(
                ["gpg", "--encrypt"], "-", "no PGP key name given"
            )
        args = self._args(
            "--armor",
            "--trust-model",
            "always",
            "--encrypt",
            "-r",
            self.key_name,
        )
        return self._run(args, plaintext, EncryptError)

    def decrypt(self, ciphertext: str) -> str:
        args = self._args("--decrypt")
        return self._run(args, ciphertext, DecryptError)

    def key_info(self, ciphertext: str) -> str:
        """Return the key(s) a message was encrypted for.

        Key IDs are resolved to user IDs when the public key is known.

        """
        # --list-packets exits non-zero without the secret key but still
        # prints the session key packets.
        args = self._args("--list-packets")
        output.annotate(f"Running `{args}`", debug=True)
        try:
            p = subprocess.run(
                args,
                input=ciphertext.encode("utf-8"),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GPGCallError.from_context(
                e.cmd, "-", f"timed out after {e.timeout}s"
            ) from e
        # Depending on the version gpg writes packets to stdout or stderr.
        packets = (p.stdout + p.stderr).decode("utf-8", errors="replace")
        keyids = []
        for line in packets.splitlines():
            match = KEYID_PATTERN.match(line.strip())
            if match and match.group(1).upper() not in keyids:
                keyids.append(match.group(1).upper())
        if not keyids:
            raise GPGCallError.from_context(args, p.returncode, packets)
        return ", ".join(self._describe_key(keyid) for keyid in keyids)

    def _describe_key(self, keyid: str) -> str:
        args = self._args("--with-colons", "--list-keys", keyid)
        try:
            listing = self._run(args, "")
        except GPGCallError:
            return keyid
        for line in listing.splitlines():
            fields = line.split(":")
            if fields[0] == "uid" and len(fields) > 9:
                return f"{keyid} ({fields[9]})"
        return keyid
