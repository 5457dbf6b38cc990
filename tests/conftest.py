"""
Shared fixtures for PayGate SDK tests
"""

from pathlib import Path

import pytest

from paygate_sdk.signing.signer import GatewaySigner

KEYS_DIR = Path(__file__).parent / "keys"

PRIVATE_KEY_PATH = KEYS_DIR / "test-private.key"
PROTECTED_PRIVATE_KEY_PATH = KEYS_DIR / "test-private-protected.key"
PUBLIC_KEY_PATH = KEYS_DIR / "test-public.pub"
PROTECTED_KEY_PASSWORD = "correct-horse"

KNOWN_MESSAGE = "Hello World! Příliš žluťoučký kůň?"

KNOWN_SHA1_SIGNATURE = (
    "O3wcGxCQL+zdmAaHJ9FxZ9FaefXfclAFaK8GuVEphPoQ9324Is9byCxPEkHje/XTAMoRNp5s6DgvN9guC8TG/nklDJBtiS5YmkD8VXiHEkgN"
    "CCz21zINpX1KRlfjPFMIhGsuX6XNnfgwAQuL2rqxSVjliEQ9dTTsbfO54tw/ZDxrKcQ4XiCLWc3EA6xGuuvjhRucJtn+kmvki8fclNTdcNEX"
    "qbF5I6qbHSlLKaGWOQrYLl4Mg1bLrJ5sKQ4FWKWHrnKE6DDWrrKvF8CFk/Msdl2230WAzMuNrtQC/BHvpd+x8iZiBFH99Myf/HUx03VvAuCm"
    "qsFkTE58P/UA12XDmQ=="
)

KNOWN_SHA256_SIGNATURE = (
    "duCkCGxIey7IN35MQ7VlKTyISnIjTueb5S+YwL0LaFRR+8PeF//+SHtGAkX4RDx6IVuWqk0CQyJaXLVufp2nOjOI8Yb7aSoshAZvhnp35UUI"
    "7vfmikWUxxaAYIdDjgy6NbnrKv7RDUu24vmq7cOqpxD0/K0gyaK+WWupxYiyuBr9qQQsJHwgDq4wyuUsZ9d99Qe+RSskdUVQWixMfW5jTuaD"
    "f+6P3eTDueZ4zaC9JhQOVnEWiRfPgwoNj/gagSn0osug7PQR9aCkOjdndPERxc/vJ3HBj+nIT/tbVKAl1oG3eDcMZGjH+uRmCIhCfJ5wZstH"
    "f2+DO6r/mDchmF7i9A=="
)

FIXED_DTTM = "20240131123456"


def corrupt(signature: str, index: int = 10) -> str:
    """Replace one base64 character of a signature with another valid one"""
    replacement = "A" if signature[index] != "A" else "B"
    return signature[:index] + replacement + signature[index + 1:]


@pytest.fixture
def signer():
    """Signer whose key pair plays both the merchant and the gateway"""
    return GatewaySigner(
        str(PRIVATE_KEY_PATH),
        str(PUBLIC_KEY_PATH),
        dttm_factory=lambda: FIXED_DTTM,
    )


@pytest.fixture
def signer_sha256():
    """Signer using SHA-256 signatures"""
    return GatewaySigner(
        str(PRIVATE_KEY_PATH),
        str(PUBLIC_KEY_PATH),
        hash_algorithm="sha256",
        dttm_factory=lambda: FIXED_DTTM,
    )
