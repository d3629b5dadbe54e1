"""Pytest configuration and fixtures."""


import pytest

SAMPLE_MANIFEST = """\
# Demo crate manifest
[package]
name = "demo"
version = "0.1.0"
edition = "2021"

[dependencies]
serde = "1.0"
tokio = { version = "1", features = ["full"] }  # async runtime
rand = { version = "0.8", default-features = false, features = ["std"] }
helper = { path = "../helper" }
json = { version = "1", package = "serde_json" }
vendored = { git = "https://example.com/vendored.git" }

[dev-dependencies]
criterion = "0.5"

[target.'cfg(unix)'.dependencies]
libc = "0.2"
"""

HELPER_MANIFEST = """\
[package]
name = "helper"
version = "0.2.0"

[features]
default = ["std"]
std = ["alloc"]
alloc = []
extra = ["dep:itoa"]
"""


def write_manifest(directory, content):
    directory.mkdir(parents=True, exist_ok=True)
    manifest = directory / "Cargo.toml"
    manifest.write_text(content)
    return manifest


@pytest.fixture
def sample_manifest(tmp_path):
    """A single-package manifest next to a local helper crate."""
    write_manifest(tmp_path / "helper", HELPER_MANIFEST)
    return write_manifest(tmp_path / "demo", SAMPLE_MANIFEST)


@pytest.fixture
def workspace_manifest(tmp_path):
    """A virtual workspace with two member crates and one excluded crate."""
    write_manifest(
        tmp_path / "crates" / "app",
        '[package]\nname = "app"\nversion = "0.1.0"\n\n[dependencies]\nserde = "1.0"\n',
    )
    write_manifest(
        tmp_path / "crates" / "lib",
        '[package]\nname = "lib"\nversion = "0.1.0"\n\n[dependencies]\nanyhow = "1"\n',
    )
    write_manifest(
        tmp_path / "crates" / "scratch",
        '[package]\nname = "scratch"\nversion = "0.1.0"\n',
    )
    return write_manifest(
        tmp_path,
        '[workspace]\nmembers = ["crates/*"]\nexclude = ["crates/scratch"]\n',
    )
