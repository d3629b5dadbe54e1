"""Core data models for DepEdit."""

from dataclasses import dataclass, field
from pathlib import Path

from tomlkit import TOMLDocument

MANIFEST_FILE_NAME = "Cargo.toml"

DEPENDENCY_KINDS = ("dependencies", "dev-dependencies", "build-dependencies")


@dataclass(frozen=True)
class Remote:
    """Dependency fetched from a registry."""


@dataclass(frozen=True)
class Local:
    """Dependency on a crate found at a filesystem path."""

    path: str


DependencyOrigin = Remote | Local


@dataclass
class FeatureData:
    """A feature exposed by a dependency."""

    name: str
    sub_features: list[str] = field(default_factory=list)
    is_default: bool = False
    is_enabled: bool = False


@dataclass
class Dependency:
    """Logical state of a single declared dependency."""

    dep_name: str
    version: str = ""
    origin: DependencyOrigin = field(default_factory=Remote)
    features: dict[str, FeatureData] = field(default_factory=dict)
    uses_default_features: bool = True
    package: str | None = None  # `package = "..."` rename
    optional: bool = False

    @property
    def name(self) -> str:
        return self.package or self.dep_name

    def get_name(self) -> str:
        return self.name

    def get_version(self) -> str:
        return self.version

    def can_use_default(self) -> bool:
        return self.uses_default_features

    def is_local(self) -> bool:
        return isinstance(self.origin, Local)

    def enabled_features(self) -> list[str]:
        return [name for name, data in self.features.items() if data.is_enabled]

    def get_features_to_enable(self) -> list[str]:
        """Features that have to be listed explicitly in the manifest.

        Features already turned on by default features, or implied by another
        enabled feature, are left out.
        """
        enabled = self.enabled_features()

        implied: set[str] = set()
        for name in enabled:
            implied |= self._implied_features(name)

        to_enable = []
        for name in enabled:
            data = self.features[name]
            if self.uses_default_features and data.is_default:
                continue
            if name in implied:
                continue
            to_enable.append(name)

        return to_enable

    def _implied_features(self, name: str) -> set[str]:
        """Same-crate features transitively enabled by ``name``, excluding itself."""
        implied: set[str] = set()
        pending = list(self.features[name].sub_features) if name in self.features else []

        while pending:
            sub = pending.pop()
            if sub == name or sub in implied or sub not in self.features:
                continue
            implied.add(sub)
            pending.extend(self.features[sub].sub_features)

        return implied

    def enable_feature(self, name: str) -> None:
        """Enable a feature and everything it implies."""
        if name == "default":
            self.set_default_features(True)
            return

        if name not in self.features:
            self.features[name] = FeatureData(name=name)

        self.features[name].is_enabled = True
        for sub in self._implied_features(name):
            self.features[sub].is_enabled = True

    def disable_feature(self, name: str) -> None:
        """Disable a feature and every enabled feature that implies it."""
        if name == "default":
            self.set_default_features(False)
            return

        data = self.features.get(name)
        if data is None:
            return

        # Default features can only be turned off by dropping default-features.
        if data.is_default and self.uses_default_features:
            self.uses_default_features = False

        data.is_enabled = False
        for other in self.enabled_features():
            if name in self._implied_features(other):
                self.features[other].is_enabled = False

    def toggle_feature(self, name: str) -> None:
        data = self.features.get(name)
        if data is not None and data.is_enabled:
            self.disable_feature(name)
        else:
            self.enable_feature(name)

    def set_default_features(self, enabled: bool) -> None:
        self.uses_default_features = enabled
        if enabled:
            for data in self.features.values():
                if data.is_default:
                    self.enable_feature(data.name)

    def set_version(self, version: str) -> None:
        self.version = version

    def set_local(self, path: str) -> None:
        self.origin = Local(path)

    def set_remote(self) -> None:
        self.origin = Remote()


@dataclass(frozen=True)
class DependencyType:
    """Manifest section a package's dependency list is read from and written to."""

    kind: str = "dependencies"
    target: str | None = None  # cfg expression or target triple

    def __post_init__(self):
        if self.kind not in DEPENDENCY_KINDS:
            raise ValueError(f"Unknown dependency kind: {self.kind}")

    def key(self) -> str:
        """Dotted key path of the section inside the manifest."""
        if self.target:
            return f"target.{self.target}.{self.kind}"
        return self.kind


@dataclass
class Package:
    """One package scope of a manifest."""

    name: str
    dir_path: str
    dependency_type: DependencyType
    toml_doc: TOMLDocument
    dependencies: list[Dependency] = field(default_factory=list)

    @property
    def manifest_path(self) -> Path:
        return Path(self.dir_path) / MANIFEST_FILE_NAME


@dataclass
class DependencySelectorItem:
    """A dependency matched by a filter, with the matched character positions."""

    dependency: Dependency
    indices: list[int]
