"""Cargo.toml loading and parsing into packages and dependencies."""

import logging
from collections.abc import Mapping
from pathlib import Path

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.exceptions import TOMLKitError

from .errors import ParseError
from .models import (
    MANIFEST_FILE_NAME,
    Dependency,
    DependencyType,
    FeatureData,
    Local,
    Package,
    Remote,
)

logger = logging.getLogger(__name__)

GLOB_CHARS = ("*", "?", "[")


def resolve_manifest_path(path: str | Path) -> Path:
    """Return the manifest file for a manifest path or a crate directory."""
    path = Path(path)
    if path.is_dir():
        return path / MANIFEST_FILE_NAME
    return path


def document_from_path(path: str | Path) -> TOMLDocument:
    """Load a manifest into a mutable, format-preserving document.

    Args:
        path: Path to a Cargo.toml file or to the directory holding it

    Returns:
        Parsed tomlkit document

    Raises:
        ParseError: The file is missing, unreadable or not valid TOML
    """
    manifest_path = resolve_manifest_path(path)

    try:
        # Decode ourselves so line endings survive the round trip untouched
        content = manifest_path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(manifest_path, str(e)) from e

    try:
        doc = tomlkit.parse(content)
    except TOMLKitError as e:
        raise ParseError(manifest_path, str(e)) from e

    logger.debug("Loaded manifest %s", manifest_path)
    return doc


def is_workspace(doc: TOMLDocument) -> bool:
    """Check whether a manifest defines a workspace."""
    return isinstance(doc.get("workspace"), Mapping)


def package_from_document(
    doc: TOMLDocument,
    manifest_path: str | Path,
    dependency_type: DependencyType | None = None,
) -> Package:
    """Build a Package from a parsed manifest.

    Args:
        doc: Parsed manifest, owned by the returned package from now on
        manifest_path: Location of the manifest the document was read from
        dependency_type: Section the package's dependencies are read from

    Returns:
        Package with its dependencies in declaration order
    """
    dependency_type = dependency_type or DependencyType()
    manifest_path = resolve_manifest_path(manifest_path)

    package_table = doc.get("package")
    name = package_table.get("name") if isinstance(package_table, Mapping) else None
    if not isinstance(name, str):
        raise ParseError(manifest_path, "missing [package] name")

    dir_path = manifest_path.parent
    section = _section_values(doc, dependency_type.key())

    dependencies = []
    for dep_name, value in section.items():
        dependency = parse_dependency(dep_name, value, dir_path)
        if dependency:
            dependencies.append(dependency)

    return Package(
        name=str(name),
        dir_path=str(dir_path),
        dependency_type=dependency_type,
        toml_doc=doc,
        dependencies=dependencies,
    )


def packages_from_workspace(
    doc: TOMLDocument,
    manifest_path: str | Path,
    dependency_type: DependencyType | None = None,
) -> list[Package]:
    """Build one Package per workspace member.

    The root manifest is the first member when it also has a [package]
    table. Any member failing to parse fails the whole workspace.
    """
    manifest_path = resolve_manifest_path(manifest_path)
    root_dir = manifest_path.parent

    packages = []
    if isinstance(doc.get("package"), Mapping):
        packages.append(package_from_document(doc, manifest_path, dependency_type))

    for member_dir in _workspace_member_dirs(doc["workspace"].unwrap(), root_dir):
        member_manifest = member_dir / MANIFEST_FILE_NAME
        member_doc = document_from_path(member_manifest)
        packages.append(package_from_document(member_doc, member_manifest, dependency_type))

    logger.debug("Workspace %s has %d package(s)", manifest_path, len(packages))
    return packages


def _workspace_member_dirs(workspace: dict, root_dir: Path) -> list[Path]:
    """Expand workspace member patterns into crate directories."""
    root = root_dir.resolve()
    excluded = [(root_dir / path).resolve() for path in workspace.get("exclude", [])]

    seen = {root}
    member_dirs = []

    for pattern in workspace.get("members", []):
        if any(char in pattern for char in GLOB_CHARS):
            candidates = sorted(
                path for path in root_dir.glob(pattern)
                if (path / MANIFEST_FILE_NAME).is_file()
            )
        else:
            candidate = root_dir / pattern
            if not (candidate / MANIFEST_FILE_NAME).is_file():
                raise ParseError(candidate / MANIFEST_FILE_NAME, "workspace member has no manifest")
            candidates = [candidate]

        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            if any(resolved == path or path in resolved.parents for path in excluded):
                logger.debug("Skipping excluded workspace member %s", candidate)
                continue
            seen.add(resolved)
            member_dirs.append(candidate)

    return member_dirs


def _section_values(doc: TOMLDocument, key: str) -> dict:
    """Plain values of a dotted-key table, empty when the table is absent."""
    node = doc
    for segment in key.split("."):
        if not isinstance(node, Mapping) or segment not in node:
            return {}
        node = node[segment]

    if not isinstance(node, Mapping):
        return {}
    return node.unwrap() if hasattr(node, "unwrap") else dict(node)


def parse_dependency(dep_name: str, value, package_dir: Path) -> Dependency | None:
    """Parse one entry of a dependency table.

    Args:
        dep_name: Key the dependency is declared under
        value: Plain value of the entry, a version string or a table
        package_dir: Directory of the declaring package, base of local paths

    Returns:
        Dependency, or None for entries that cannot be edited here
        (git sources and workspace-inherited dependencies)
    """
    if isinstance(value, str):
        return Dependency(dep_name=dep_name, version=value)

    if not isinstance(value, Mapping):
        logger.debug("Skipping dependency %s with unsupported value %r", dep_name, value)
        return None

    if value.get("workspace") is True:
        logger.debug("Skipping workspace-inherited dependency %s", dep_name)
        return None
    if "git" in value:
        logger.debug("Skipping git dependency %s", dep_name)
        return None

    path = value.get("path")
    origin = Local(str(path)) if path is not None else Remote()

    # `default_features` is the deprecated spelling
    uses_default = value.get("default-features", value.get("default_features", True))

    dependency = Dependency(
        dep_name=dep_name,
        version=str(value.get("version", "")),
        origin=origin,
        uses_default_features=bool(uses_default),
        package=value.get("package"),
        optional=bool(value.get("optional", False)),
    )

    if isinstance(origin, Local):
        dependency.features = read_local_features(package_dir / origin.path)

    if dependency.uses_default_features:
        for data in list(dependency.features.values()):
            if data.is_default:
                dependency.enable_feature(data.name)

    for feature in value.get("features", []):
        dependency.enable_feature(str(feature))

    return dependency


def read_local_features(crate_dir: Path) -> dict[str, FeatureData]:
    """Read the features a local crate exposes.

    Returns an empty mapping when the crate's manifest cannot be read.
    """
    try:
        doc = document_from_path(crate_dir / MANIFEST_FILE_NAME)
    except ParseError as e:
        logger.warning("Could not read features of local crate %s: %s", crate_dir, e.reason)
        return {}

    table = doc.get("features")
    declared = table.unwrap() if isinstance(table, Mapping) else {}

    return features_from_table(declared)


def features_from_table(declared: dict[str, list[str]]) -> dict[str, FeatureData]:
    """Build feature data from a [features] table, resolving the default closure."""
    defaults: set[str] = set()
    pending = list(declared.get("default", []))
    while pending:
        name = pending.pop()
        if name in defaults or name not in declared or name == "default":
            continue
        defaults.add(name)
        pending.extend(declared[name])

    return {
        name: FeatureData(
            name=name,
            sub_features=[str(sub) for sub in subs],
            is_default=name in defaults,
        )
        for name, subs in declared.items()
        if name != "default"
    }
