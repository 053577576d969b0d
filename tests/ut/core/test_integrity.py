"""完整性摘要校验测试"""

import base64
import hashlib

import pytest

from minipm.core.dep.integrity import compute_integrity, verify_integrity
from minipm.core.exceptions import (
    IntegrityError,
    IntegrityMismatchError,
    UnsupportedAlgorithmError,
)

CONTENT = b"hello tarball\x00\x01\x02"


class TestVerifyIntegrity:
    def test_round_trip(self) -> None:
        expected = "sha512-" + base64.b64encode(hashlib.sha512(CONTENT).digest()).decode()
        assert compute_integrity(CONTENT) == expected
        verify_integrity(expected, CONTENT)

    @pytest.mark.parametrize("index", [0, 5, len(CONTENT) - 1])
    def test_flipped_byte_is_mismatch(self, index: int) -> None:
        digest = compute_integrity(CONTENT)
        tampered = bytearray(CONTENT)
        tampered[index] ^= 0xFF
        with pytest.raises(IntegrityMismatchError) as exc_info:
            verify_integrity(digest, bytes(tampered), package="left-pad")
        assert exc_info.value.package == "left-pad"
        assert exc_info.value.expected == digest.split("-", 1)[1]
        assert "left-pad" in str(exc_info.value)

    def test_md5_unsupported_regardless_of_content(self) -> None:
        with pytest.raises(UnsupportedAlgorithmError):
            verify_integrity("md5-abc123", CONTENT)
        with pytest.raises(UnsupportedAlgorithmError):
            verify_integrity("md5-abc123", b"")

    @pytest.mark.parametrize("digest", [
        "sha512",
        "sha256-abc",
        "SHA512-abc",
        "sha512-abc-def",
        "",
    ])
    def test_malformed_digest_is_unsupported(self, digest: str) -> None:
        with pytest.raises(UnsupportedAlgorithmError):
            verify_integrity(digest, CONTENT)

    def test_comparison_is_case_sensitive(self) -> None:
        digest = compute_integrity(CONTENT)
        swapped = "sha512-" + digest.split("-", 1)[1].swapcase()
        with pytest.raises(IntegrityMismatchError):
            verify_integrity(swapped, CONTENT)

    def test_errors_share_base_class(self) -> None:
        assert issubclass(UnsupportedAlgorithmError, IntegrityError)
        assert issubclass(IntegrityMismatchError, IntegrityError)
