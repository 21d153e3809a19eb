"""Profile photo size and type checks."""

from __future__ import annotations

import base64

import pytest

from rotamax.errors import ValidationRejected
from rotamax.images import MAX_IMAGE_BYTES, encode_profile_image


def test_exact_limit_is_accepted() -> None:
    raw = b"\x89" * MAX_IMAGE_BYTES
    encoded = encode_profile_image(raw, "image/png")

    prefix = "data:image/png;base64,"
    assert encoded.startswith(prefix)
    assert base64.b64decode(encoded[len(prefix):]) == raw


def test_one_byte_over_is_rejected() -> None:
    with pytest.raises(ValidationRejected) as excinfo:
        encode_profile_image(b"\x00" * (500 * 1024 + 1), "image/jpeg")
    assert "500KB" in excinfo.value.message


def test_jpg_alias_normalised() -> None:
    assert encode_profile_image(b"abc", "image/jpg").startswith("data:image/jpeg;base64,")


@pytest.mark.parametrize("content_type", ["image/gif", "text/plain", None])
def test_other_types_rejected(content_type) -> None:
    with pytest.raises(ValidationRejected):
        encode_profile_image(b"abc", content_type)


def test_empty_file_rejected() -> None:
    with pytest.raises(ValidationRejected):
        encode_profile_image(b"", "image/png")
