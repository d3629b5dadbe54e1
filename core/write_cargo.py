"""Write dependency state back into a Cargo.toml without disturbing the rest of it."""

import logging
import os
import shutil
import tempfile
from collections.abc import MutableMapping

import tomlkit
from tomlkit.items import InlineTable, Item, Table

from .errors import SectionNotFoundError
from .models import Dependency, Local, Package, Remote

logger = logging.getLogger(__name__)

# Attributes derived from the Dependency model; anything else in an entry is
# carried over untouched.
MANAGED_KEYS = (
    "path",
    "version",
    "features",
    "default-features",
    "default_features",
    "package",
    "optional",
)


def find_section(package: Package) -> MutableMapping:
    """Navigate to the package's dependency table.

    Raises:
        SectionNotFoundError: A segment of the dotted key is missing or is
            not a table
    """
    key = package.dependency_type.key()

    node = package.toml_doc
    for segment in key.split("."):
        if not isinstance(node, MutableMapping) or segment not in node:
            raise SectionNotFoundError(package.name, key)
        node = node[segment]

    if not isinstance(node, MutableMapping):
        raise SectionNotFoundError(package.name, key)

    return node


def dependency_fields(dependency: Dependency) -> list[tuple[str, object]]:
    """Attributes of the expanded form, in manifest order."""
    fields = []

    if isinstance(dependency.origin, Local):
        fields.append(("path", dependency.origin.path))

    if dependency.version:
        fields.append(("version", dependency.get_version()))

    features = sorted(dependency.get_features_to_enable())
    if features:
        array = tomlkit.array()
        for name in features:
            array.append(name)
        fields.append(("features", array))

    if not dependency.can_use_default():
        fields.append(("default-features", False))

    if dependency.package:
        fields.append(("package", dependency.package))

    if dependency.optional:
        fields.append(("optional", True))

    return fields


def unmanaged_fields(existing) -> list[tuple[str, object]]:
    """Attributes of an existing entry that the model does not describe."""
    if not isinstance(existing, MutableMapping):
        return []
    return [(key, value) for key, value in existing.items() if key not in MANAGED_KEYS]


def needs_table(dependency: Dependency, extra: list | None = None) -> bool:
    """Whether a bare version string would lose part of the dependency's state."""
    return (
        not dependency.can_use_default()
        or bool(dependency.get_features_to_enable())
        or not isinstance(dependency.origin, Remote)
        or dependency.package is not None
        or dependency.optional
        or bool(extra)
    )


def render_dependency(dependency: Dependency, existing=None) -> Item:
    """Build the minimal manifest value for a dependency.

    Args:
        dependency: Dependency to encode
        existing: Current value of the entry, if any; attributes it has that
            the model does not manage are kept

    Returns:
        A version string, or an inline table when the string form cannot
        describe the dependency
    """
    extra = unmanaged_fields(existing)

    if not needs_table(dependency, extra):
        return tomlkit.string(dependency.get_version())

    table = tomlkit.inline_table()
    for key, value in dependency_fields(dependency) + extra:
        table[key] = value
    pad_inline_table(table)
    return table


def pad_inline_table(table: InlineTable) -> None:
    """Space the braces of an inline table the way Cargo writes them: `{ a = 1 }`."""
    entries = [item for key, item in table.value.body if key is not None]
    if not entries:
        return
    for item in entries:
        item.trivia.indent = ""
        item.trivia.trail = ""
    entries[0].trivia.indent = " "
    entries[-1].trivia.trail = " "


def patch_dependency(section: MutableMapping, dependency: Dependency) -> None:
    """Replace one dependency's entry in its section, leaving siblings alone."""
    key = dependency.dep_name
    existing = section.get(key)

    if isinstance(existing, Table):
        # `[dependencies.name]` tables are rewritten in place to keep their layout
        for managed in MANAGED_KEYS:
            if managed in existing:
                del existing[managed]

        fields = dependency_fields(dependency)
        if not needs_table(dependency, unmanaged_fields(existing)):
            fields = [("version", dependency.get_version())]

        for field_key, value in fields:
            existing[field_key] = value
        return

    section[key] = render_dependency(dependency, existing)


def write_manifest(package: Package) -> None:
    """Serialize the package's document over its manifest file.

    The content goes to a temporary file next to the manifest which then
    replaces it, so an interrupted write never leaves a truncated manifest.
    """
    path = package.manifest_path
    content = tomlkit.dumps(package.toml_doc)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %s", path)
