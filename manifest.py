"""Package manifest (.nuspec) sanitization and parsing.

Structure of the parsed document:

    <package>
      <metadata minClientVersion="...">
        <id/> <version/> <title/> <authors/> ...
        <dependencies>
          <group targetFramework="net40"> <dependency id="..." version="..."/> </group>
          <dependency .../>                     (ungrouped form)
        </dependencies>
        <frameworkAssemblies>
          <frameworkAssembly assemblyName="..." targetFramework="net40, net45"/>
        </frameworkAssemblies>
        <references> <reference file="..."/> </references>
      </metadata>
    </package>

Every nuspec schema version uses a different namespace, so namespaces are
ignored when matching element names.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from frameworks import FrameworkName, parse_framework_name
from nupkg import ManifestError

# Some archive writers emit a declaration whose encoding does not match the
# bytes actually stored, which the XML parser rejects.
_DECLARATION = re.compile(r"\A[ \t]*<\?xml[^>]*\?>[ \t]*(?:\r\n|\r|\n)?")


@dataclass
class Dependency:
    id: str
    version_spec: str | None = None


@dataclass
class DependencySet:
    target_framework: FrameworkName | None
    dependencies: list[Dependency] = field(default_factory=list)


@dataclass
class FrameworkAssembly:
    assembly_name: str
    supported_frameworks: list[FrameworkName] = field(default_factory=list)


@dataclass
class Manifest:
    """Metadata read from a package manifest."""
    id: str
    version: str
    title: str | None = None
    authors: list[str] = field(default_factory=list)
    owners: list[str] = field(default_factory=list)
    description: str | None = None
    summary: str | None = None
    release_notes: str | None = None
    copyright: str | None = None
    language: str | None = None
    tags: str | None = None
    project_url: str | None = None
    license_url: str | None = None
    icon_url: str | None = None
    require_license_acceptance: bool = False
    min_client_version: str | None = None
    dependency_sets: list[DependencySet] = field(default_factory=list)
    framework_assemblies: list[FrameworkAssembly] = field(default_factory=list)
    references: list[str] = field(default_factory=list)


def sanitize_manifest(data: bytes) -> bytes:
    """Drop a leading BOM and a leading XML declaration line.

    Only a line that is an XML declaration is removed, so running this twice
    gives the same result as running it once.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ManifestError(f"Manifest is not valid UTF-8: {e}") from e
    return _DECLARATION.sub("", text, count=1).encode("utf-8")


def _strip_ns(tag: str) -> str:
    """Remove namespace from a tag like {http://...}name → name."""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _strip_ns(child.tag) == name]


def _child(element: ET.Element, name: str) -> ET.Element | None:
    found = _children(element, name)
    return found[0] if found else None


def _text(metadata: ET.Element, name: str) -> str | None:
    el = _child(metadata, name)
    if el is None or el.text is None:
        return None
    return el.text.strip() or None


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_frameworks(value: str | None) -> list[FrameworkName]:
    try:
        return [parse_framework_name(name) for name in _split_list(value)]
    except ValueError as e:
        raise ManifestError(f"Invalid target framework {value!r}: {e}") from e


def _parse_dependency(element: ET.Element) -> Dependency:
    dep_id = element.get("id")
    if not dep_id:
        raise ManifestError("Dependency is missing the 'id' attribute")
    return Dependency(dep_id, element.get("version") or None)


def _parse_dependency_sets(metadata: ET.Element) -> list[DependencySet]:
    deps_el = _child(metadata, "dependencies")
    if deps_el is None:
        return []

    groups = _children(deps_el, "group")
    if not groups:
        flat = [_parse_dependency(d) for d in _children(deps_el, "dependency")]
        return [DependencySet(None, flat)] if flat else []

    sets = []
    for group in groups:
        frameworks = _parse_frameworks(group.get("targetFramework"))
        target = frameworks[0] if frameworks else None
        sets.append(DependencySet(target, [_parse_dependency(d) for d in _children(group, "dependency")]))
    return sets


def _parse_framework_assemblies(metadata: ET.Element) -> list[FrameworkAssembly]:
    fa_el = _child(metadata, "frameworkAssemblies")
    if fa_el is None:
        return []
    result = []
    for el in _children(fa_el, "frameworkAssembly"):
        name = el.get("assemblyName")
        if not name:
            raise ManifestError("Framework assembly is missing the 'assemblyName' attribute")
        result.append(FrameworkAssembly(name, _parse_frameworks(el.get("targetFramework"))))
    return result


def _parse_references(metadata: ET.Element) -> list[str]:
    refs_el = _child(metadata, "references")
    if refs_el is None:
        return []
    # Either <reference/> elements directly or wrapped in <group>
    elements = _children(refs_el, "reference")
    for group in _children(refs_el, "group"):
        elements.extend(_children(group, "reference"))
    return [el.get("file") for el in elements if el.get("file")]


def read_manifest(data: bytes) -> Manifest:
    """Parse a sanitized manifest buffer. Raises ManifestError."""
    if not data or not data.strip():
        raise ManifestError("Manifest is missing or empty")
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ManifestError(f"Cannot parse manifest: {e}") from e

    if _strip_ns(root.tag) != "package":
        raise ManifestError(f"Unexpected manifest root element: {_strip_ns(root.tag)}")
    metadata = _child(root, "metadata")
    if metadata is None:
        raise ManifestError("Manifest has no metadata element")

    package_id = _text(metadata, "id")
    version = _text(metadata, "version")
    if not package_id or not version:
        raise ManifestError("Manifest must specify both id and version")

    return Manifest(
        id=package_id,
        version=version,
        title=_text(metadata, "title"),
        authors=_split_list(_text(metadata, "authors")),
        owners=_split_list(_text(metadata, "owners")),
        description=_text(metadata, "description"),
        summary=_text(metadata, "summary"),
        release_notes=_text(metadata, "releaseNotes"),
        copyright=_text(metadata, "copyright"),
        language=_text(metadata, "language"),
        tags=_text(metadata, "tags"),
        project_url=_text(metadata, "projectUrl"),
        license_url=_text(metadata, "licenseUrl"),
        icon_url=_text(metadata, "iconUrl"),
        require_license_acceptance=(_text(metadata, "requireLicenseAcceptance") or "").lower() == "true",
        min_client_version=metadata.get("minClientVersion"),
        dependency_sets=_parse_dependency_sets(metadata),
        framework_assemblies=_parse_framework_assemblies(metadata),
        references=_parse_references(metadata),
    )
