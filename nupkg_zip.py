"""ZIP package reader: expose a .nupkg archive's manifest, files and frameworks.

The reader never keeps the archive open. Every query opens a fresh stream
through its StreamSource, reads what it needs and closes it again. File
contents are copied into memory so they outlive the archive handle.
"""

import io
import logging
import posixpath
import zipfile
import zlib
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from cache import Invalidatable, MemoryCache, default_cache
from frameworks import FrameworkName, parse_framework_from_path
from manifest import read_manifest, sanitize_manifest
from nupkg import ArchiveReadError, Package, PackageFile
from paths import is_assembly_reference, is_manifest, is_package_file, normalize_entry_path
from streams import StreamSource, bytes_source, file_source, stream_source

logger = logging.getLogger(__name__)

CACHE_TIMEOUT = 15  # seconds
FILES_CACHE_KEY = "FILES"
ASSEMBLIES_CACHE_KEY = "ASSEMBLIES"

_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, OSError)


@contextmanager
def _open_archive(source: StreamSource) -> Iterator[zipfile.ZipFile]:
    """Open a new stream and ZipFile, closing both however the block exits."""
    try:
        stream = source()
    except OSError as e:
        raise ArchiveReadError(f"Cannot open package stream: {e}") from e
    with stream:
        try:
            zf = zipfile.ZipFile(stream, "r")
        except _READ_ERRORS as e:
            raise ArchiveReadError(f"Cannot open ZIP file: {e}") from e
        with zf:
            try:
                yield zf
            except _READ_ERRORS as e:
                raise ArchiveReadError(f"Error reading from ZIP: {e}") from e


def _payload_entries(zf: zipfile.ZipFile) -> Iterator[tuple[str, zipfile.ZipInfo]]:
    """Yield (normalized path, entry) for every payload file in the archive."""
    for info in zf.infolist():
        if info.is_dir():
            continue
        path = normalize_entry_path(info.filename)
        # Escaped names such as '%2F' decode to a directory or to nothing
        if not path or path.endswith("/"):
            continue
        if is_package_file(path):
            yield path, info


def extract_manifest(source: StreamSource) -> bytes:
    """Read the root-level manifest entry and return its sanitized bytes.

    Returns empty bytes if the archive has no manifest. If there are several,
    the last one read wins.
    """
    data = None
    with _open_archive(source) as zf:
        for info in zf.infolist():
            path = normalize_entry_path(info.filename)
            if info.is_dir() or "/" in path or not is_manifest(path):
                continue
            logger.debug("Extracting manifest %s", path)
            data = zf.read(info)
    if data is None:
        logger.warning("Package archive contains no manifest")
        return b""
    return sanitize_manifest(data)


class ZipPackageFile(PackageFile):
    """A payload file whose content was copied out of the archive when it was created."""

    def __init__(self, path: str, data: bytes):
        if not path:
            raise ValueError("Path cannot be empty")
        self.path = path
        self._data = data
        self.target_framework, self.effective_path = parse_framework_from_path(path)

    @classmethod
    def from_entry(cls, zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> "ZipPackageFile":
        return cls(normalize_entry_path(info.filename), zf.read(info))

    @classmethod
    def from_stream(cls, path: str, stream: BinaryIO) -> "ZipPackageFile":
        return cls(path, stream.read())

    def get_stream(self) -> BinaryIO:
        return io.BytesIO(self._data)


class ZipPackageAssemblyReference(ZipPackageFile):
    """A payload file under lib/ that consumers reference as an assembly."""

    def __init__(self, file: ZipPackageFile):
        super().__init__(file.path, file._data)

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)


class ZipPackage(Package):
    """A package backed by a ZIP archive opened on demand.

    The manifest is read once, at construction, so a ZipPackage that exists
    always has an id and version. File and assembly lists are stored in cache
    (when one is given) under keys derived from that id and version.
    """

    def __init__(self, source: StreamSource, cache: MemoryCache | None = None,
                 cache_timeout: float = CACHE_TIMEOUT):
        if source is None:
            raise ValueError("Stream source cannot be None")
        self._source = source
        self._cache = cache
        self._cache_timeout = cache_timeout
        self._bind_manifest(read_manifest(extract_manifest(source)))
        logger.debug("Loaded manifest for %s %s", self.id, self.version)

    @classmethod
    def from_path(cls, path: str, enable_caching: bool = False,
                  cache: MemoryCache | None = None) -> "ZipPackage":
        """Open the package file at path.

        With enable_caching, results go to cache, or to the process-wide cache
        when none is given.
        """
        if enable_caching and cache is None:
            cache = default_cache()
        return cls(file_source(path), cache=cache if enable_caching else None)

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "ZipPackage":
        """Read an open stream into memory and close it."""
        return cls(stream_source(stream))

    @classmethod
    def from_bytes(cls, data: bytes) -> "ZipPackage":
        return cls(bytes_source(data))

    @property
    def caching_enabled(self) -> bool:
        return self._cache is not None

    def _cache_key(self, kind: str) -> str:
        return f"{kind}_{self.id}_{self.version}"

    def get_stream(self) -> BinaryIO:
        return self._source()

    def get_files(self) -> list[ZipPackageFile]:
        if self._cache is not None:
            files = self._cache.get_or_add(
                self._cache_key(FILES_CACHE_KEY), self._get_files_no_cache, self._cache_timeout)
            return list(files)
        return self._get_files_no_cache()

    def get_assembly_references(self) -> list[ZipPackageAssemblyReference]:
        if self._cache is not None:
            assemblies = self._cache.get_or_add(
                self._cache_key(ASSEMBLIES_CACHE_KEY), self._get_assemblies_no_cache, self._cache_timeout)
            return list(assemblies)
        return self._get_assemblies_no_cache()

    def get_supported_frameworks(self) -> list[FrameworkName]:
        found, files = False, None
        if self._cache is not None:
            found, files = self._cache.try_get(self._cache_key(FILES_CACHE_KEY))
        if found:
            file_frameworks = [f.target_framework for f in files]
        else:
            file_frameworks = self._scan_file_frameworks()

        result = super().get_supported_frameworks()
        for fw in file_frameworks:
            if fw is not None and fw not in result:
                result.append(fw)
        return result

    def clear_cache(self) -> None:
        """Drop the cached file and assembly lists so the next query re-scans."""
        if self._cache is None:
            return
        self._cache.remove(self._cache_key(ASSEMBLIES_CACHE_KEY))
        self._cache.remove(self._cache_key(FILES_CACHE_KEY))

    def _get_files_no_cache(self) -> list[ZipPackageFile]:
        logger.debug("Scanning files of %s %s", self.id, self.version)
        with _open_archive(self._source) as zf:
            return [ZipPackageFile.from_entry(zf, info) for _, info in _payload_entries(zf)]

    def _get_assemblies_no_cache(self) -> list[ZipPackageAssemblyReference]:
        return [ZipPackageAssemblyReference(f) for f in self.get_files()
                if is_assembly_reference(f.path)]

    def _scan_file_frameworks(self) -> list[FrameworkName | None]:
        # Only paths are needed here, so entry contents are never read
        logger.debug("Scanning frameworks of %s %s", self.id, self.version)
        with _open_archive(self._source) as zf:
            return [parse_framework_from_path(path)[0] for path, _ in _payload_entries(zf)]


def clear_cache(package) -> None:
    """Drop cached results of any package that supports it. Others are ignored."""
    if isinstance(package, Invalidatable):
        package.clear_cache()
