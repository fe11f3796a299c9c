import textwrap

import pytest

from securepillar import ConfigurationError
from securepillar.config import (
    EXAMPLE_CONFIG,
    Profile,
    pki_settings,
    read_config,
    select_profile,
)

CONFIG = textwrap.dedent(
    """\
    profiles:
      - name: dev
        default: true
        default_key: Dev Salt Master
        gnupg_home: ~/.gnupg-dev
      - name: prod
        default_key: Prod Salt Master
        default_pub_ring: /srv/pubring.gpg
    """
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG)
    return str(path)


def test_missing_config_writes_example(tmp_path):
    path = tmp_path / "conf" / "config.yaml"
    assert read_config(str(path)) == []
    assert path.read_text() == EXAMPLE_CONFIG
    # The example is all comments.
    assert read_config(str(path)) == []


def test_read_config(config_file):
    dev, prod = read_config(config_file)
    assert dev.name == "dev"
    assert dev.default
    assert dev.default_key == "Dev Salt Master"
    assert prod.default is False
    assert prod.default_pub_ring == "/srv/pubring.gpg"


def test_select_default_profile(config_file):
    profiles = read_config(config_file)
    assert select_profile(profiles).name == "dev"
    assert select_profile(profiles, "prod").name == "prod"


def test_select_unknown_profile(config_file):
    with pytest.raises(ConfigurationError) as e:
        select_profile(read_config(config_file), "staging")
    assert "No profile named `staging`" in str(e.value)


def test_select_without_default():
    assert select_profile([Profile(name="x")]) is None


@pytest.mark.parametrize(
    "content, message",
    [
        ("profiles: [", "while parsing"),
        ("- a\n", "expected a mapping at the top level"),
        ("profiles: foo\n", "`profiles` must be a list"),
        ("profiles:\n  - name: x\n    colour: red\n", "colour"),
    ],
)
def test_invalid_config(tmp_path, content, message):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ConfigurationError) as e:
        read_config(str(path))
    assert message in str(e.value)


def test_pki_settings_from_profile(monkeypatch):
    monkeypatch.delenv("GNUPGHOME", raising=False)
    profile = Profile(
        default_key="Prod Salt Master", default_pub_ring="/srv/pubring.gpg"
    )
    assert pki_settings(profile) == dict(
        key_name="Prod Salt Master",
        gnupg_home=None,
        pub_ring="/srv/pubring.gpg",
        timeout=None,
    )


def test_pki_settings_explicit_values_win(monkeypatch):
    monkeypatch.setenv("GNUPGHOME", "/env/gnupg")
    profile = Profile(default_key="Dev", gnupg_home="/profile/gnupg")
    assert pki_settings(profile, key_name="Other") == dict(
        key_name="Other",
        gnupg_home="/profile/gnupg",
        pub_ring=None,
        timeout=None,
    )
    assert pki_settings(
        profile, gnupg_home="/cli/gnupg", pub_ring="/cli/pubring.gpg"
    ) == dict(
        key_name="Dev",
        gnupg_home="/cli/gnupg",
        pub_ring="/cli/pubring.gpg",
        timeout=None,
    )


def test_pki_settings_fall_back_to_gnupghome(monkeypatch):
    monkeypatch.setenv("GNUPGHOME", "/env/gnupg")
    assert pki_settings(None, key_name="K1") == dict(
        key_name="K1", gnupg_home="/env/gnupg", pub_ring=None, timeout=None
    )


def test_secret_keyring_setting_is_accepted(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "profiles:\n"
        "  - name: legacy\n"
        "    default: true\n"
        "    default_key: Salt Master\n"
        "    default_pub_ring: ~/.gnupg/pubring.gpg\n"
        "    default_sec_ring: ~/.gnupg/secring.gpg\n"
    )
    (profile,) = read_config(str(path))
    assert profile.default_sec_ring == "~/.gnupg/secring.gpg"
    assert "sec_ring" not in pki_settings(profile)


def test_pki_settings_timeout(monkeypatch):
    monkeypatch.delenv("GNUPGHOME", raising=False)
    profile = Profile(default_key="Dev", timeout=30)
    assert pki_settings(profile)["timeout"] == 30
    assert pki_settings(profile, timeout=5)["timeout"] == 5
    assert pki_settings(None)["timeout"] is None
