"""Dependency document: every package of a manifest or workspace."""

import logging
from pathlib import Path

from .errors import NotFoundError
from .fuzzy import FuzzyMatcher
from .models import Dependency, DependencySelectorItem, DependencyType, Package
from .parse_cargo import (
    document_from_path,
    is_workspace,
    package_from_document,
    packages_from_workspace,
    resolve_manifest_path,
)
from .write_cargo import find_section, patch_dependency, write_manifest

logger = logging.getLogger(__name__)


class Document:
    """All packages reachable from one manifest, editable in place.

    Indices returned by :meth:`get_packages_names` and by the dependency
    listings are the only valid ids; anything else raises IndexError.
    """

    def __init__(self, path: str | Path, dependency_type: DependencyType | None = None):
        """Load a manifest or a workspace.

        Args:
            path: Path to a Cargo.toml, or to the directory containing it
            dependency_type: Section every package reads its dependencies from

        Raises:
            ParseError: The manifest or any workspace member cannot be parsed
        """
        manifest_path = resolve_manifest_path(path)
        doc = document_from_path(manifest_path)

        if is_workspace(doc):
            self.packages = packages_from_workspace(doc, manifest_path, dependency_type)
        else:
            self.packages = [package_from_document(doc, manifest_path, dependency_type)]

    @classmethod
    def from_packages(cls, packages: list[Package]) -> "Document":
        """Build a document from already loaded packages."""
        document = cls.__new__(cls)
        document.packages = list(packages)
        return document

    def _package(self, package_id: int) -> Package:
        if not 0 <= package_id < len(self.packages):
            raise IndexError(f"package index {package_id} out of range")
        return self.packages[package_id]

    def get_packages_names(self) -> list[str]:
        return [package.name for package in self.packages]

    def get_package(self, package_id: int) -> Package | None:
        if 0 <= package_id < len(self.packages):
            return self.packages[package_id]
        return None

    def get_deps(self, package_id: int) -> list[Dependency]:
        return self._package(package_id).dependencies

    def get_deps_mut(self, package_id: int) -> list[Dependency]:
        return self._package(package_id).dependencies

    def get_deps_filtered_view(self, package_id: int, query: str) -> list[DependencySelectorItem]:
        """Dependencies matching ``query``, best match first.

        Dependencies that do not match are left out; equal scores keep their
        declaration order.
        """
        matcher = FuzzyMatcher()

        matches = []
        for dependency in self.get_deps(package_id):
            result = matcher.fuzzy_match(dependency.get_name(), query)
            if result is not None:
                matches.append((result[0], DependencySelectorItem(dependency, result[1])))

        matches.sort(key=lambda match: match[0], reverse=True)
        return [item for _, item in matches]

    def get_dep(self, package_id: int, name: str) -> Dependency:
        return self.get_deps(package_id)[self.get_dep_index(package_id, name)]

    def get_dep_mut(self, package_id: int, name: str) -> Dependency:
        return self.get_deps_mut(package_id)[self.get_dep_index(package_id, name)]

    def get_dep_index(self, package_id: int, name: str) -> int:
        """Position of the dependency declared under ``name``.

        Raises:
            NotFoundError: No dependency is declared under that name
        """
        for index, dependency in enumerate(self.get_deps(package_id)):
            if dependency.dep_name == name:
                return index
        raise NotFoundError(name)

    def write_dep_by_name(self, package_id: int, name: str) -> None:
        self.write_dep(package_id, self.get_dep_index(package_id, name))

    def write_dep(self, package_id: int, dep_index: int) -> None:
        """Encode one dependency into its package's manifest and save the file.

        Only the dependency's own entry changes; the rest of the file keeps
        its exact text.

        Raises:
            SectionNotFoundError: The package's dependency section is missing
            OSError: The manifest could not be written
        """
        package = self._package(package_id)
        section = find_section(package)

        if not 0 <= dep_index < len(package.dependencies):
            raise IndexError(f"dependency index {dep_index} out of range")
        dependency = package.dependencies[dep_index]

        patch_dependency(section, dependency)
        write_manifest(package)

        logger.debug("Wrote dependency %s of package %s", dependency.dep_name, package.name)

    def is_workspace(self) -> bool:
        return len(self.packages) > 1
