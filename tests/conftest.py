from __future__ import annotations

from pathlib import Path

import pytest

from covg.profile import Profile, parse_profiles

TESTDATA = Path(__file__).parent / "testdata"


@pytest.fixture
def testdata() -> Path:
    return TESTDATA


@pytest.fixture
def fixture_profile() -> Profile:
    """Coverage of tests/testdata/testpkg as produced by `go test -covermode=count`."""
    (profile,) = parse_profiles(TESTDATA / "testpkg.cover")
    return profile
