"""Archive entry path normalization and payload classification."""

import posixpath
from urllib.parse import unquote

MANIFEST_EXTENSION = ".nuspec"

# Directory prefixes reserved for container metadata (OPC relationships, core properties)
EXCLUDE_PATHS = ("_rels", "package")

ASSEMBLY_EXTENSIONS = (".dll", ".exe", ".winmd")
RESOURCE_ASSEMBLY_EXTENSION = ".resources.dll"
EMPTY_FOLDER_FILE = "_._"
LIB_DIRECTORY = "lib"


def normalize_entry_path(name: str) -> str:
    """Turn a container entry name into a relative, '/'-separated, URI-decoded path."""
    path = unquote(name).replace("\\", "/")
    # Collapse repeated slashes
    while "//" in path:
        path = path.replace("//", "/")
    return path.lstrip("/")


def is_manifest(path: str) -> bool:
    return posixpath.splitext(path)[1].lower() == MANIFEST_EXTENSION


def is_package_file(path: str) -> bool:
    """Return True if the normalized entry path is a payload file.

    Entries whose directory starts with an excluded prefix and the manifest
    itself are not payload. Everything else is.
    """
    directory = posixpath.dirname(path).lower()
    if any(directory.startswith(prefix) for prefix in EXCLUDE_PATHS):
        return False
    return not is_manifest(path)


def is_assembly_reference(path: str) -> bool:
    """Return True if the payload path is an assembly a consumer would reference."""
    lower = path.lower()
    if not lower.startswith(LIB_DIRECTORY + "/"):
        return False
    if lower.endswith(RESOURCE_ASSEMBLY_EXTENSION):
        return False
    if posixpath.basename(path) == EMPTY_FOLDER_FILE:
        return False
    return posixpath.splitext(lower)[1] in ASSEMBLY_EXTENSIONS
