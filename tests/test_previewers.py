"""
Tests for PDF previewer detection and forward-search presets.
"""

from __future__ import annotations

import http.client
import io
import os
from unittest.mock import patch

import pytest

from fakes import FakeEnvironment, FakeReleaseClient
from texlaunch.editor_command import EditorCommand
from texlaunch.previewers import (
    EVINCE_SCRIPT_NAME,
    EVINCE_SCRIPT_UPDATED,
    EVINCE_SCRIPT_URL,
    SKIM_DISPLAYLINE,
    Previewer,
    PreviewerKind,
    helper_script_is_fresh,
)
from texlaunch.releases import DownloadedFileType, ReleaseClient
from texlaunch.types import Os


def _set_mtime(path, ts):
    os.utime(path, (ts, ts))


# ---------------------------------------------------------------------------
# Detection order
# ---------------------------------------------------------------------------

class TestDetermine:
    def test_nothing_installed(self, fake_env, work_dir, fake_client):
        assert Previewer.determine(fake_env, work_dir, fake_client) is None
        assert fake_client.downloads == []

    def test_skim_on_mac_wins(self, work_dir, fake_client):
        env = FakeEnvironment(os_=Os.MAC).install(SKIM_DISPLAYLINE, "zathura", "evince")
        result = Previewer.determine(env, work_dir, fake_client)
        assert result == Previewer(PreviewerKind.SKIM)
        assert fake_client.downloads == []

    def test_skim_ignored_off_mac(self, work_dir, fake_client):
        env = FakeEnvironment(os_=Os.LINUX).install(SKIM_DISPLAYLINE, "zathura")
        result = Previewer.determine(env, work_dir, fake_client)
        assert result.kind is PreviewerKind.ZATHURA
        assert SKIM_DISPLAYLINE not in env.which_calls

    @pytest.mark.parametrize("installed, expected", [
        (("zathura", "sioyek", "qpdfview", "okular"), PreviewerKind.ZATHURA),
        (("sioyek", "qpdfview", "okular"), PreviewerKind.SIOYEK),
        (("qpdfview", "okular"), PreviewerKind.QPDFVIEW),
        (("okular",), PreviewerKind.OKULAR),
    ])
    def test_plain_lookup_order(self, work_dir, fake_client, installed, expected):
        env = FakeEnvironment().install(*installed)
        assert Previewer.determine(env, work_dir, fake_client).kind is expected

    def test_evince_downloads_helper_script(self, work_dir, fake_client):
        env = FakeEnvironment().install("evince", "zathura")
        result = Previewer.determine(env, work_dir, fake_client)
        assert result.kind is PreviewerKind.EVINCE
        assert result.helper_script == work_dir / EVINCE_SCRIPT_NAME
        assert result.helper_script.is_file()
        assert fake_client.downloads == [
            (EVINCE_SCRIPT_URL, work_dir / EVINCE_SCRIPT_NAME, DownloadedFileType.UNCOMPRESSED),
        ]

    def test_evince_reuses_fresh_script(self, work_dir, fake_client):
        script = work_dir / EVINCE_SCRIPT_NAME
        script.write_text("# cached\n")
        env = FakeEnvironment().install("evince")
        result = Previewer.determine(env, work_dir, fake_client)
        assert result.kind is PreviewerKind.EVINCE
        assert fake_client.downloads == []
        assert script.read_text() == "# cached\n"

    def test_evince_refetches_stale_script(self, work_dir, fake_client):
        script = work_dir / EVINCE_SCRIPT_NAME
        script.write_text("# old\n")
        _set_mtime(script, EVINCE_SCRIPT_UPDATED.timestamp() - 86400)
        env = FakeEnvironment().install("evince")
        result = Previewer.determine(env, work_dir, fake_client)
        assert result.kind is PreviewerKind.EVINCE
        assert len(fake_client.downloads) == 1
        assert script.read_text() == "# evince_synctex\n"

    def test_evince_download_failure_falls_through(self, work_dir):
        client = FakeReleaseClient(download_error=True)
        env = FakeEnvironment().install("evince", "okular")
        result = Previewer.determine(env, work_dir, client)
        assert result.kind is PreviewerKind.OKULAR

    def test_evince_download_failure_without_fallback(self, work_dir):
        client = FakeReleaseClient(download_error=True)
        env = FakeEnvironment().install("evince")
        assert Previewer.determine(env, work_dir, client) is None

    def test_evince_truncated_download_falls_through(self, work_dir):
        class Truncated(io.BytesIO):
            def read(self, *args):
                raise http.client.IncompleteRead(b"#!", 100)

        env = FakeEnvironment().install("evince", "zathura")
        with patch("texlaunch.releases.urllib.request.urlopen", return_value=Truncated()):
            result = Previewer.determine(env, work_dir, ReleaseClient())
        assert result.kind is PreviewerKind.ZATHURA
        assert not (work_dir / EVINCE_SCRIPT_NAME).exists()


class TestHelperScriptFreshness:
    def test_missing_file(self, tmp_path):
        assert not helper_script_is_fresh(tmp_path / "nope.py")

    def test_directory_is_not_fresh(self, tmp_path):
        d = tmp_path / EVINCE_SCRIPT_NAME
        d.mkdir()
        assert not helper_script_is_fresh(d)

    def test_exactly_at_cutoff_is_fresh(self, tmp_path):
        script = tmp_path / EVINCE_SCRIPT_NAME
        script.write_text("")
        _set_mtime(script, EVINCE_SCRIPT_UPDATED.timestamp())
        assert helper_script_is_fresh(script)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

class TestCreatePreset:
    def test_zathura(self):
        preset = Previewer(PreviewerKind.ZATHURA).create_preset(EditorCommand.ZED)
        assert preset.executable == "zathura"
        assert preset.args == [
            "--synctex-forward", "%l:1:%f", "-x", "zed %%{input}:%%{line}", "%p",
        ]

    def test_skim_has_no_inverse_callback(self):
        preset = Previewer(PreviewerKind.SKIM).create_preset(EditorCommand.FLATPAK)
        assert preset.executable == SKIM_DISPLAYLINE
        assert preset.args == ["-r", "%l", "%p", "%f"]

    def test_sioyek_uses_editor_command(self):
        preset = Previewer(PreviewerKind.SIOYEK).create_preset(EditorCommand.ZEDITOR)
        assert preset.executable == "sioyek"
        assert 'zeditor "%%1":%%2' in preset.args
        assert preset.args[-1] == "%p"

    def test_okular_shell_fallback(self):
        preset = Previewer(PreviewerKind.OKULAR).create_preset(EditorCommand.FLATPAK)
        assert preset.executable == "sh"
        assert preset.args[0] == "-c"
        first, second = preset.args[1].split(" || ")
        assert "--editor-cmd \"flatpak run dev.zed.Zed '%%f':%%l:%%c\"" in first
        assert "--editor-cmd" not in second
        assert second == 'okular --unique --noraise "%p#src:%l %f"'

    def test_qpdfview(self):
        preset = Previewer(PreviewerKind.QPDFVIEW).create_preset(EditorCommand.ZED)
        assert preset.to_dict() == {
            "executable": "qpdfview",
            "args": ["--unique", "%p#src:%f:%l:1"],
        }

    def test_evince_passes_script_path(self, tmp_path):
        script = tmp_path / EVINCE_SCRIPT_NAME
        preset = Previewer(PreviewerKind.EVINCE, helper_script=script).create_preset(
            EditorCommand.ZED)
        assert preset.executable == "python"
        assert preset.args[0] == str(script)
        assert preset.args[-1] == "zed %%f:%%l"

    def test_sumatra_has_empty_preset(self):
        preset = Previewer(PreviewerKind.SUMATRAPDF).create_preset(EditorCommand.ZED)
        assert preset.to_dict() == {}

    def test_every_kind_produces_a_preset(self):
        for kind in PreviewerKind:
            preset = Previewer(kind).create_preset(EditorCommand.ZED)
            assert isinstance(preset.to_dict(), dict)
