"""
Editor-session state tying the resolvers together.

A LatexSession lives as long as the editor keeps the extension loaded.
The first command request detects the editor command and the PDF
previewer; both results are kept for the rest of the session and feed
every later configuration request.
"""

from __future__ import annotations

import logging
from typing import Any

from texlaunch.acquisition import StatusSink, TexlabResolver
from texlaunch.config import LaunchConfig
from texlaunch.editor_command import EditorCommand
from texlaunch.platform_probe import HostEnvironment, LocalEnvironment
from texlaunch.previewers import Previewer
from texlaunch.releases import ReleaseClient
from texlaunch.settings import LspSettings
from texlaunch.types import LaunchCommand
from texlaunch.workspace_config import merge

logger = logging.getLogger(__name__)


class LatexSession:
    """Per-instance cache of the detected previewer, editor command and binary."""

    def __init__(
        self,
        env: HostEnvironment | None = None,
        config: LaunchConfig | None = None,
        client: ReleaseClient | None = None,
        status_sink: StatusSink | None = None,
    ) -> None:
        self.env = env or LocalEnvironment()
        self.config = config or LaunchConfig()
        self.client = client or ReleaseClient(timeout_s=self.config.request_timeout_s)
        self.resolver = TexlabResolver(
            self.env,
            self.config.work_dir,
            self.client,
            status_sink=status_sink,
            repo=self.config.github_repo,
        )
        self.previewer: Previewer | None = None
        self.editor_command: EditorCommand | None = None
        self._detected = False

    def detect(self) -> None:
        """Run editor-command and previewer detection once per session."""
        if self._detected:
            return
        self.editor_command = EditorCommand.determine(self.env)
        self.previewer = Previewer.determine(self.env, self.config.work_dir, self.client)
        self._detected = True
        logger.info(
            "Detected editor command %r, previewer %s",
            self.command_name.invocation,
            self.previewer.kind.value if self.previewer else "none",
        )

    @property
    def command_name(self) -> EditorCommand:
        return self.editor_command or EditorCommand.default()

    def language_server_command(self, lsp_settings: LspSettings) -> LaunchCommand:
        """Return the launch command for texlab (detecting the previewer first)."""
        self.detect()
        return self.resolver.resolve_command(lsp_settings)

    def workspace_configuration(self, lsp_settings: LspSettings) -> dict[str, Any]:
        """Return the merged workspace settings for texlab."""
        return merge(self.previewer, self.command_name, lsp_settings.settings)
