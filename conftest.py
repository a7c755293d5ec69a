"""Root pytest configuration: shared manifest fixtures."""

import gzip

import pytest

# Excerpt of a package .MTREE file (one keyword set per line, no line
# continuations).
SAMPLE_MANIFEST = b"""#mtree
/set type=file uid=0 gid=0 mode=644
./.BUILDINFO time=1523250074.300237174 size=8602 md5digest=13c0a46c2fb9f18a1a237d4904b6916e sha256digest=db1941d00645bfaab04dd3898ee8b8484874f4880bf03f717adf43a9f30d9b8c
./.PKGINFO time=1523250074.276237110 size=682 md5digest=fdb9ac9040f2e78f3561f27e5b31c815 sha256digest=5d41b48b74d490b7912bdcef6cf7344322c52024c0a06975b64c3ca0b4c452d1
/set mode=755
./usr time=1523250049.905171912 type=dir
./usr/bin time=1523250065.373213293 type=dir
"""


@pytest.fixture
def sample_manifest() -> bytes:
    """Raw bytes of a small well-formed manifest."""
    return SAMPLE_MANIFEST


@pytest.fixture
def manifest_file(tmp_path):
    """The sample manifest written to a plain file."""
    path = tmp_path / "sample.mtree"
    path.write_bytes(SAMPLE_MANIFEST)
    return path


@pytest.fixture
def gzip_manifest_file(tmp_path):
    """The sample manifest gzip-compressed under a name with no suffix."""
    path = tmp_path / ".MTREE"
    path.write_bytes(gzip.compress(SAMPLE_MANIFEST))
    return path


@pytest.fixture
def bad_manifest_file(tmp_path):
    """A manifest with one malformed line between two good ones."""
    path = tmp_path / "bad.mtree"
    path.write_bytes(b"./a size=1\n./b bogus_key=1\n./c size=3\n")
    return path
