"""Tests for daemon path builders."""

import hashlib

from kite_api import url_helpers as urls


class TestCleanPath:
    """Test buffer path encoding (must stay bit-exact)."""

    def test_posix_path(self):
        """Separators become colons."""
        assert urls.clean_path("/path/to/file.py") == ":path:to:file.py"

    def test_spaces_are_percent_encoded(self):
        """Characters outside encodeURI's safe set are encoded."""
        assert urls.clean_path("/path/my file.py") == ":path:my%20file.py"

    def test_windows_drive(self):
        """Leading drive letter is rewritten, backslashes become colons."""
        assert urls.clean_path("C:\\path\\to\\file.py") == ":windows:C:path:to:file.py"

    def test_lowercase_drive_untouched(self):
        """Only uppercase drive letters are rewritten."""
        assert urls.clean_path("c:\\file.py") == "c::file.py"

    def test_non_ascii(self):
        """Non-ASCII characters are UTF-8 percent-encoded."""
        assert urls.clean_path("/tmp/café.py") == ":tmp:caf%C3%A9.py"

    def test_encode_uri_safe_characters(self):
        """encodeURI leaves reserved characters alone."""
        assert urls.clean_path("/a/b(1),c;d=e+f.py") == ":a:b(1),c;d=e+f.py"


class TestHoverPath:
    """Test hover endpoint paths."""

    def test_hover_path(self):
        source = "import os\nos.path"
        state = hashlib.md5(source.encode("utf-8")).hexdigest()

        path = urls.hover_path("/path/to/file.py", source, 12)

        assert path == f"/api/buffer/atom/:path:to:file.py/{state}/hover?cursor_runes=12"

    def test_hover_path_with_editor_and_encoding(self):
        source = "x = 1"
        state = urls.source_hash(source)

        path = urls.hover_path("/a.py", source, 0, editor="vscode", encoding="utf-16")

        assert path == f"/api/buffer/vscode/:a.py/{state}/hover?cursor_runes=0&offset_encoding=utf-16"

    def test_source_hash_is_md5_of_utf8(self):
        assert urls.source_hash("é") == hashlib.md5("é".encode("utf-8")).hexdigest()


class TestQueryPaths:
    """Test filename-keyed and id-keyed endpoint paths."""

    def test_status_path(self):
        assert urls.status_path("/a b.py") == "/clientapi/status?filename=/a%20b.py"
        assert urls.status_path() == "/clientapi/status?filename="

    def test_authorized_path(self):
        assert (
            urls.authorized_path("/home/me/project/a.py")
            == "/clientapi/permissions/authorized?filename=/home/me/project/a.py"
        )

    def test_project_dir_path(self):
        assert urls.project_dir_path("/x/y.py") == "/clientapi/projectdir?filename=/x/y.py"

    def test_escape_id(self):
        """Semicolons are escaped on top of encodeURI."""
        assert urls.escape_id("python;;;os.path") == "python%3B%3B%3Bos.path"
        assert urls.escape_id(42) == "42"

    def test_report_paths(self):
        assert urls.symbol_report_path("python;os") == "/api/editor/symbol/python%3Bos"
        assert urls.value_report_path("os") == "/api/editor/value/os"
        assert urls.usage_path("u1") == "/api/editor/usages/u1"
        assert urls.example_path(7) == "/api/python/curation/7"

    def test_members_and_usages_paths(self):
        assert urls.members_path("os", 2, 10) == "/api/editor/value/os/members?offset=2&limit=10"
        assert urls.usages_path("os") == "/api/editor/value/os/usages?offset=0&limit=999"

    def test_setting_path(self):
        assert urls.setting_path("theme") == "/clientapi/settings/theme"
