"""HMAC algorithms usable for OTP generation."""

from typing import Dict, Type, Union

from cryptography.hazmat.primitives import hashes, hmac

from simple_otp.errors import InvalidHmacAlgorithm


class HmacAlgorithm:
    """
    A keyed-hash function together with its output size.

    Each call builds a fresh HMAC context, so instances can be shared
    between threads.
    """

    def __init__(self, name: str, hash_class: Type[hashes.HashAlgorithm]):
        self.name = name
        self._hash_class = hash_class

    @property
    def digest_size(self) -> int:
        """Size of the HMAC output in bytes."""
        return self._hash_class.digest_size

    def digest(self, key: bytes, message: bytes) -> bytes:
        """
        Compute HMAC(key, message).

        Args:
            key: The shared secret.
            message: The message to authenticate.

        Returns:
            The raw HMAC digest.
        """
        mac = hmac.HMAC(key, self._hash_class())
        mac.update(message)
        return mac.finalize()

    def __repr__(self) -> str:
        return f"HmacAlgorithm({self.name!r})"


SHA1 = HmacAlgorithm("SHA1", hashes.SHA1)
SHA256 = HmacAlgorithm("SHA256", hashes.SHA256)
SHA512 = HmacAlgorithm("SHA512", hashes.SHA512)

ALGORITHMS: Dict[str, HmacAlgorithm] = {
    algorithm.name: algorithm for algorithm in (SHA1, SHA256, SHA512)
}


def get_algorithm(selector: Union[HmacAlgorithm, str]) -> HmacAlgorithm:
    """
    Resolve an algorithm selector.

    Args:
        selector: An HmacAlgorithm instance or a name such as "SHA1",
            "sha256" or "SHA-512".

    Returns:
        The matching HmacAlgorithm.

    Raises:
        InvalidHmacAlgorithm: If the selector names no supported algorithm.
    """
    if isinstance(selector, HmacAlgorithm):
        return selector

    if isinstance(selector, str):
        key = selector.strip().upper().replace("-", "")
        if key in ALGORITHMS:
            return ALGORITHMS[key]

    raise InvalidHmacAlgorithm(f"Unsupported HMAC algorithm: {selector!r}")
