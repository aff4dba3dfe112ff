"""Target framework names and framework inference from package file paths.

Folder names inside a package look like:

    net45              -> .NETFramework,Version=v4.5
    net40-client       -> .NETFramework,Version=v4.0,Profile=Client
    sl4-wp71           -> Silverlight,Version=v4.0,Profile=WindowsPhone71
    portable-net45+win8 -> .NETPortable,Version=v0.0,Profile=net45+win8
    45                 -> .NETFramework,Version=v4.5
"""

import re
from dataclasses import dataclass

NET_FRAMEWORK = ".NETFramework"
PORTABLE = ".NETPortable"
NET_PLATFORM = ".NETPlatform"

KNOWN_FOLDERS = ("content", "lib", "tools", "build")

# Lowercase alias -> canonical identifier
_IDENTIFIERS = {
    "net": NET_FRAMEWORK,
    ".netframework": NET_FRAMEWORK,
    "netframework": NET_FRAMEWORK,
    "netcore": ".NETCore",
    ".netcore": ".NETCore",
    "winrt": ".NETCore",
    "netmf": ".NETMicroFramework",
    ".netmicroframework": ".NETMicroFramework",
    "sl": "Silverlight",
    "silverlight": "Silverlight",
    "portable": PORTABLE,
    "netportable": PORTABLE,
    ".netportable": PORTABLE,
    "wp": "WindowsPhone",
    "windowsphone": "WindowsPhone",
    "wpa": "WindowsPhoneApp",
    "windowsphoneapp": "WindowsPhoneApp",
    "win": "Windows",
    "windows": "Windows",
    "aspnet": "ASP.Net",
    "aspnetcore": "ASP.NetCore",
    "asp.net": "ASP.Net",
    "asp.netcore": "ASP.NetCore",
    "native": "native",
    "monoandroid": "MonoAndroid",
    "monotouch": "MonoTouch",
    "monomac": "MonoMac",
    "xamarin.ios": "Xamarin.iOS",
    "xamarinios": "Xamarin.iOS",
    "xamarin.mac": "Xamarin.Mac",
    "xamarinmac": "Xamarin.Mac",
    "dotnet": NET_PLATFORM,
    ".netplatform": NET_PLATFORM,
    "dnx": "DNX",
    "dnxcore": "DNXCore",
}

# Canonical identifier -> short folder prefix
_SHORT_IDENTIFIERS = {
    NET_FRAMEWORK: "net",
    ".NETCore": "win",
    ".NETMicroFramework": "netmf",
    "Silverlight": "sl",
    PORTABLE: "portable",
    "WindowsPhone": "wp",
    "WindowsPhoneApp": "wpa",
    "Windows": "win",
    "ASP.Net": "aspnet",
    "ASP.NetCore": "aspnetcore",
    "native": "native",
    "MonoAndroid": "monoandroid",
    "MonoTouch": "monotouch",
    "MonoMac": "monomac",
    "Xamarin.iOS": "xamarinios",
    "Xamarin.Mac": "xamarinmac",
    NET_PLATFORM: "dotnet",
    "DNX": "dnx",
    "DNXCore": "dnxcore",
}

_PROFILES = {
    "client": "Client",
    "full": "",
    "wp": "WindowsPhone",
    "wp71": "WindowsPhone71",
    "cf": "CompactFramework",
}

_SHORT_PROFILES = {v: k for k, v in _PROFILES.items() if v}

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class FrameworkName:
    """An immutable target framework: identifier, version and optional profile."""
    identifier: str
    version: tuple[int, ...] = (0, 0)
    profile: str = ""

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version)

    @property
    def full_name(self) -> str:
        name = f"{self.identifier},Version=v{self.version_string}"
        if self.profile:
            name += f",Profile={self.profile}"
        return name

    @property
    def short_name(self) -> str:
        prefix = _SHORT_IDENTIFIERS.get(self.identifier, self.identifier)
        if self.identifier == PORTABLE:
            return f"{prefix}-{self.profile}" if self.profile else prefix
        name = prefix
        if self.version != (0, 0) and not (self.identifier == NET_PLATFORM and self.version == (5, 0)):
            name += "".join(str(part) for part in self.version)
        if self.profile:
            name += "-" + _SHORT_PROFILES.get(self.profile, self.profile)
        return name

    def __str__(self) -> str:
        return self.full_name


UNSUPPORTED = FrameworkName("Unsupported", (0, 0))


def _parse_version(text: str) -> tuple[int, ...] | None:
    """Parse '45' as 4.5 and '4.5.1' as 4.5.1. Returns None when not a version."""
    if text.isdigit():
        # Integer versions are read digit by digit, at most four of them
        digits = text[:4].ljust(2, "0")
        return tuple(int(d) for d in digits)
    parts = text.split(".")
    if not 2 <= len(parts) <= 4 or not all(p.isdigit() for p in parts):
        return None
    return tuple(int(p) for p in parts)


def _validate_portable_profile(profile: str) -> None:
    if not profile:
        raise ValueError("Portable framework must name at least one target framework")
    for part in profile.split("+"):
        if not part:
            raise ValueError(f"Invalid portable profile: {profile!r}")
        if part.lower().startswith("portable"):
            raise ValueError(f"Portable profile cannot contain another portable framework: {profile!r}")


def parse_framework_name(text: str) -> FrameworkName:
    """Parse a '{identifier}{version}-{profile}' folder name.

    Unknown identifiers return UNSUPPORTED. Structurally invalid names raise
    ValueError.
    """
    if text is None:
        raise ValueError("Framework name cannot be None")
    parts = text.split("-")
    if len(parts) > 2:
        raise ValueError(f"Invalid framework name: {text!r}")
    name_and_version = parts[0].strip()
    profile = parts[1].strip() if len(parts) > 1 else ""
    if not name_and_version:
        raise ValueError(f"Invalid framework name: {text!r}")

    match = _DIGITS.search(name_and_version)
    if match:
        identifier = name_and_version[:match.start()].strip()
        version_text = name_and_version[match.start():].strip()
    else:
        identifier = name_and_version
        version_text = ""

    if identifier:
        identifier = _IDENTIFIERS.get(identifier.lower())
        if identifier is None:
            return UNSUPPORTED
    if profile:
        profile = _PROFILES.get(profile.lower(), profile)

    version = _parse_version(version_text) if version_text else None
    if version is None:
        if not identifier or version_text:
            return UNSUPPORTED
        version = (5, 0) if identifier == NET_PLATFORM else (0, 0)

    if not identifier:
        identifier = NET_FRAMEWORK
    if identifier == PORTABLE:
        _validate_portable_profile(profile)
    return FrameworkName(identifier, version, profile)


def parse_framework_folder(path: str, strict: bool) -> tuple[FrameworkName | None, str]:
    """Infer the framework from the first folder of a path relative to a known folder.

    Under strict parsing every first folder is a framework, even an unsupported
    one. Otherwise only recognized frameworks are stripped from the path.
    """
    if "/" not in path:
        return None, path
    folder, rest = path.split("/", 1)
    if not folder:
        return None, path
    framework = parse_framework_name(folder)
    if strict or framework != UNSUPPORTED:
        return framework, rest
    return None, path


def parse_framework_from_path(path: str) -> tuple[FrameworkName | None, str]:
    """Return (target framework or None, effective path) for a package file path."""
    for folder in KNOWN_FOLDERS:
        prefix = folder + "/"
        if len(path) > len(prefix) and path[:len(prefix)].lower() == prefix:
            try:
                framework, effective_path = parse_framework_folder(
                    path[len(prefix):], strict=folder == "lib")
            except ValueError:
                return None, path
            if framework is None:
                return None, path
            return framework, effective_path
    return None, path
