"""Tests for framework names and framework inference from package paths."""

import unittest

from frameworks import (
    UNSUPPORTED,
    FrameworkName,
    parse_framework_from_path,
    parse_framework_name,
)


class TestParseFrameworkName(unittest.TestCase):
    def test_net(self):
        self.assertEqual(parse_framework_name("net45"), FrameworkName(".NETFramework", (4, 5)))
        self.assertEqual(parse_framework_name("net451"), FrameworkName(".NETFramework", (4, 5, 1)))
        self.assertEqual(parse_framework_name("NET40"), FrameworkName(".NETFramework", (4, 0)))

    def test_bare_version(self):
        self.assertEqual(parse_framework_name("45"), FrameworkName(".NETFramework", (4, 5)))
        self.assertEqual(parse_framework_name("4"), FrameworkName(".NETFramework", (4, 0)))

    def test_dotted_version(self):
        self.assertEqual(parse_framework_name(".NETFramework4.5"), FrameworkName(".NETFramework", (4, 5)))

    def test_profiles(self):
        self.assertEqual(parse_framework_name("net40-client"),
                         FrameworkName(".NETFramework", (4, 0), "Client"))
        self.assertEqual(parse_framework_name("net40-full"), FrameworkName(".NETFramework", (4, 0)))
        self.assertEqual(parse_framework_name("sl4-wp71"),
                         FrameworkName("Silverlight", (4, 0), "WindowsPhone71"))

    def test_other_identifiers(self):
        self.assertEqual(parse_framework_name("win8"), FrameworkName("Windows", (8, 0)))
        self.assertEqual(parse_framework_name("wp8"), FrameworkName("WindowsPhone", (8, 0)))
        self.assertEqual(parse_framework_name("netcore45"), FrameworkName(".NETCore", (4, 5)))
        self.assertEqual(parse_framework_name("monoandroid"), FrameworkName("MonoAndroid", (0, 0)))
        self.assertEqual(parse_framework_name("dotnet"), FrameworkName(".NETPlatform", (5, 0)))

    def test_portable(self):
        fw = parse_framework_name("portable-net45+win8")
        self.assertEqual(fw, FrameworkName(".NETPortable", (0, 0), "net45+win8"))
        self.assertEqual(fw.short_name, "portable-net45+win8")

    def test_invalid_portable(self):
        with self.assertRaises(ValueError):
            parse_framework_name("portable")
        with self.assertRaises(ValueError):
            parse_framework_name("portable-net45+portable-win8")

    def test_unsupported(self):
        self.assertEqual(parse_framework_name("foo"), UNSUPPORTED)
        self.assertEqual(parse_framework_name("foo45"), UNSUPPORTED)
        self.assertEqual(parse_framework_name("net4x"), UNSUPPORTED)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_framework_name("net40-client-full")
        with self.assertRaises(ValueError):
            parse_framework_name("-client")

    def test_names(self):
        fw = parse_framework_name("net40-client")
        self.assertEqual(fw.full_name, ".NETFramework,Version=v4.0,Profile=Client")
        self.assertEqual(str(fw), fw.full_name)
        self.assertEqual(fw.short_name, "net40-client")
        self.assertEqual(parse_framework_name("net45").short_name, "net45")
        self.assertEqual(parse_framework_name("sl5").short_name, "sl50")

    def test_hashable(self):
        names = {parse_framework_name("net45"), parse_framework_name("NET45"), parse_framework_name("45")}
        self.assertEqual(len(names), 1)


class TestParseFrameworkFromPath(unittest.TestCase):
    def test_lib(self):
        self.assertEqual(parse_framework_from_path("lib/net45/Foo.dll"),
                         (parse_framework_name("net45"), "Foo.dll"))
        self.assertEqual(parse_framework_from_path("lib/net45/sub/Foo.dll"),
                         (parse_framework_name("net45"), "sub/Foo.dll"))

    def test_lib_unknown_folder_is_unsupported(self):
        self.assertEqual(parse_framework_from_path("lib/custom/Foo.dll"), (UNSUPPORTED, "Foo.dll"))

    def test_lib_root_file(self):
        self.assertEqual(parse_framework_from_path("lib/Foo.dll"), (None, "lib/Foo.dll"))

    def test_content(self):
        self.assertEqual(parse_framework_from_path("content/net40/a.txt"),
                         (parse_framework_name("net40"), "a.txt"))
        self.assertEqual(parse_framework_from_path("content/scripts/a.js"), (None, "content/scripts/a.js"))
        self.assertEqual(parse_framework_from_path("content/readme.txt"), (None, "content/readme.txt"))

    def test_tools_and_build(self):
        self.assertEqual(parse_framework_from_path("tools/net45/init.ps1"),
                         (parse_framework_name("net45"), "init.ps1"))
        self.assertEqual(parse_framework_from_path("build/win8/x.targets"),
                         (parse_framework_name("win8"), "x.targets"))

    def test_case_insensitive_folder(self):
        self.assertEqual(parse_framework_from_path("Lib/net45/Foo.dll"),
                         (parse_framework_name("net45"), "Foo.dll"))

    def test_unknown_top_folder(self):
        self.assertEqual(parse_framework_from_path("other/net45/a.txt"), (None, "other/net45/a.txt"))
        self.assertEqual(parse_framework_from_path("readme.txt"), (None, "readme.txt"))
        self.assertEqual(parse_framework_from_path("lib/"), (None, "lib/"))

    def test_invalid_name_never_raises(self):
        self.assertEqual(parse_framework_from_path("lib/a-b-c/Foo.dll"), (None, "lib/a-b-c/Foo.dll"))
        self.assertEqual(parse_framework_from_path("lib/portable/Foo.dll"), (None, "lib/portable/Foo.dll"))


if __name__ == "__main__":
    unittest.main()
