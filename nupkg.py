"""Base package interface, file interface and error types."""

from frameworks import FrameworkName


class PackageError(Exception):
    """Base error for package operations."""
    pass


class ManifestError(PackageError):
    """The package manifest is missing or cannot be parsed."""
    pass


class ArchiveReadError(PackageError):
    """The archive container cannot be opened or enumerated."""
    pass


class PackageFile:
    """A single payload file inside a package.

    Paths are '/'-separated and relative to the package root.
    """

    path: str
    effective_path: str
    target_framework: FrameworkName | None

    @property
    def supported_frameworks(self) -> list[FrameworkName]:
        if self.target_framework is not None:
            return [self.target_framework]
        return []

    def get_stream(self):
        """Return a new readable binary stream over the file content."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.path!r}>"


def _top_folder(path: str) -> str:
    return path.split("/", 1)[0].lower() if "/" in path else ""


class Package:
    """Abstract read-only package.

    Subclasses bind a parsed Manifest with _bind_manifest() and implement the
    file accessors.
    """

    _manifest = None

    def _bind_manifest(self, manifest) -> None:
        self._manifest = manifest

    @property
    def manifest(self):
        return self._manifest

    @property
    def id(self) -> str:
        return self._manifest.id

    @property
    def version(self) -> str:
        return self._manifest.version

    @property
    def title(self) -> str | None:
        return self._manifest.title

    @property
    def authors(self) -> list[str]:
        return self._manifest.authors

    @property
    def description(self) -> str | None:
        return self._manifest.description

    @property
    def dependency_sets(self):
        return self._manifest.dependency_sets

    @property
    def framework_assemblies(self):
        return self._manifest.framework_assemblies

    def get_supported_frameworks(self) -> list[FrameworkName]:
        """Frameworks declared by the manifest, without duplicates."""
        result: list[FrameworkName] = []
        for dep_set in self._manifest.dependency_sets:
            if dep_set.target_framework is not None and dep_set.target_framework not in result:
                result.append(dep_set.target_framework)
        for assembly in self._manifest.framework_assemblies:
            for fw in assembly.supported_frameworks:
                if fw not in result:
                    result.append(fw)
        return result

    def get_files(self) -> list[PackageFile]:
        """Return every payload file in the package."""
        raise NotImplementedError

    def get_assembly_references(self) -> list[PackageFile]:
        """Return the payload files that are loadable assemblies."""
        raise NotImplementedError

    def get_stream(self):
        """Return a new readable binary stream over the whole package."""
        raise NotImplementedError

    def _files_in(self, folder: str) -> list[PackageFile]:
        return [f for f in self.get_files() if _top_folder(f.path) == folder]

    def get_content_files(self) -> list[PackageFile]:
        return self._files_in("content")

    def get_lib_files(self) -> list[PackageFile]:
        return self._files_in("lib")

    def get_tool_files(self) -> list[PackageFile]:
        return self._files_in("tools")

    def get_build_files(self) -> list[PackageFile]:
        return self._files_in("build")

    def __str__(self) -> str:
        return f"{self.id} {self.version}"
