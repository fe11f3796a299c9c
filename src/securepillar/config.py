"""Configuration profiles.

Profiles live in ``~/.config/generate-secure-pillar/config.yaml``::

    profiles:
      - name: dev
        default: true
        default_key: Dev Salt Master
        gnupg_home: ~/.gnupg
        default_pub_ring: ~/.gnupg/pubring.gpg

"""

import os
import os.path

import yaml

from securepillar import ConfigurationError
from securepillar._output import output

CONFIG_PATH = "~/.config/generate-secure-pillar/config.yaml"

EXAMPLE_CONFIG = """\
# profiles:
#   - name: dev
#     default: true
#     default_key: Dev Salt Master
#     gnupg_home: ~/.gnupg
#     default_pub_ring: ~/.gnupg/pubring.gpg
#     timeout: 30
"""


class Profile(object):

    name = None
    default = False
    default_key = None
    gnupg_home = None
    default_pub_ring = None
    # GnuPG 2.1 keeps secret keys in the home directory, the keyring
    # setting of older configs is accepted but has no effect.
    default_sec_ring = None
    timeout = None

    def __init__(self, **kw):
        for key, value in kw.items():
            if not hasattr(self.__class__, key):
                raise TypeError(f"Unknown profile setting `{key}`")
            setattr(self, key, value)


def config_file(path=None):
    return os.path.expanduser(path or CONFIG_PATH)


def read_config(path=None):
    """Return the profiles from the config file.

    A commented example is written if the file does not exist yet.

    """
    filename = config_file(path)
    if not os.path.exists(filename):
        try:
            os.makedirs(os.path.dirname(filename), mode=0o700, exist_ok=True)
            with open(filename, "w") as f:
                f.write(EXAMPLE_CONFIG)
        except OSError as e:
            output.annotate(f"can't write default config file: {e}")
        return []

    try:
        with open(filename) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError.from_context(filename, e) from e
    if not isinstance(data, dict):
        raise ConfigurationError.from_context(
            filename, "expected a mapping at the top level"
        )
    profiles = data.get("profiles") or []
    if not isinstance(profiles, list):
        raise ConfigurationError.from_context(
            filename, "`profiles` must be a list"
        )
    try:
        return [Profile(**p) for p in profiles]
    except TypeError as e:
        raise ConfigurationError.from_context(filename, e) from e


def select_profile(profiles, name=None):
    """Return the named profile, or the default one if no name is given."""
    for profile in profiles:
        if name:
            if profile.name == name:
                return profile
        elif profile.default:
            return profile
    if name:
        raise ConfigurationError.from_context(
            config_file(), f"No profile named `{name}`"
        )
    return None


def pki_settings(
    profile=None, key_name=None, gnupg_home=None, pub_ring=None, timeout=None
):
    """Merge command line settings with a profile.

    Explicit settings win over the profile, the profile wins over
    GNUPGHOME.

    """
    settings = dict(
        key_name=key_name,
        gnupg_home=gnupg_home,
        pub_ring=pub_ring,
        timeout=timeout,
    )
    if profile is not None:
        if not settings["key_name"]:
            settings["key_name"] = profile.default_key
        if not settings["gnupg_home"]:
            settings["gnupg_home"] = profile.gnupg_home
        if not settings["pub_ring"] and not settings["gnupg_home"]:
            settings["pub_ring"] = profile.default_pub_ring
        if settings["timeout"] is None:
            settings["timeout"] = profile.timeout
    if not settings["gnupg_home"]:
        settings["gnupg_home"] = os.environ.get("GNUPGHOME") or None
    return settings
