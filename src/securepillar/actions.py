"""Operations applied to a single scalar value."""

from securepillar import NotEncryptedError, UnknownActionError

PGP_HEADER = "-----BEGIN PGP MESSAGE-----"

ENCRYPT = "encrypt"
DECRYPT = "decrypt"
VALIDATE = "validate"
ROTATE = "rotate"

ACTIONS = (ENCRYPT, DECRYPT, VALIDATE, ROTATE)


def is_encrypted(value) -> bool:
    return isinstance(value, str) and PGP_HEADER in value


def encrypt_value(pki, value: str) -> str:
    if is_encrypted(value):
        return value
    return pki.encrypt(value)


def decrypt_value(pki, value: str) -> str:
    if not is_encrypted(value):
        return value
    return pki.decrypt(value)


def key_info(pki, value: str, path=None) -> str:
    if not is_encrypted(value):
        raise NotEncryptedError.from_context(path)
    return pki.key_info(value)


def rotate_value(pki, value: str) -> str:
    # Plaintext passes through decryption and ends up encrypted.
    return pki.encrypt(decrypt_value(pki, value))


STRATEGIES = {
    ENCRYPT: encrypt_value,
    DECRYPT: decrypt_value,
    VALIDATE: key_info,
    ROTATE: rotate_value,
}


def check_action(action):
    if action not in STRATEGIES:
        raise UnknownActionError.from_context(action)
    return action


def apply(pki, action, value: str, path=None) -> str:
    """Apply `action` to a single string value."""
    check_action(action)
    if action == VALIDATE:
        return key_info(pki, value, path)
    return STRATEGIES[action](pki, value)
