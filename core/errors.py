"""Error types raised by DepEdit."""


class DepEditError(Exception):
    """Base class for recoverable DepEdit errors."""


class ParseError(DepEditError):
    """A manifest could not be loaded or is not a usable Cargo manifest."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to parse {self.path}: {reason}")


class NotFoundError(DepEditError):
    """No dependency with the requested name exists in the package."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'dependency "{name}" could not be found')


class SectionNotFoundError(DepEditError):
    """The dependency section is missing from a package's manifest."""

    def __init__(self, package: str, key: str):
        self.package = package
        self.key = key
        super().__init__(f"could not find section [{key}] in package {package}")
