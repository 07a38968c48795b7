"""
Workspace settings merge for texlab.

Layers defaults and previewer-derived settings onto the user's workspace
settings.  Only absent fields are filled in; anything the user set is
returned unchanged, including an explicit ``false``.

Merge steps:
  1. Parse the user value (malformed shapes raise ConfigurationError).
  2. Default the build command to continuous latexmk with synctex output.
  3. Default symbol hover rendering to unicode glyphs.
  4. With a detected previewer and no user forwardSearch section, insert
     the previewer preset and switch on build-on-save and
     forward-search-after-build where unset.
"""

from __future__ import annotations

import logging
from typing import Any

from texlaunch.editor_command import EditorCommand
from texlaunch.previewers import Previewer
from texlaunch.settings import BuildSettings, TexlabSettings, WorkspaceSettings

logger = logging.getLogger(__name__)

DEFAULT_BUILD_EXECUTABLE = "latexmk"
DEFAULT_BUILD_ARGS = (
    "-pvc",
    "-view=none",
    "-pdf",
    "-interaction=nonstopmode",
    "-synctex=1",
    "%f",
)
DEFAULT_HOVER = {"symbols": "glyph"}


def apply_build_defaults(texlab: TexlabSettings) -> None:
    build = texlab.build
    if build is None:
        build = texlab.build = BuildSettings()
    if build.executable is not None:
        return
    build.executable = DEFAULT_BUILD_EXECUTABLE
    if build.args is None:
        build.args = list(DEFAULT_BUILD_ARGS)


def apply_hover_defaults(texlab: TexlabSettings) -> None:
    if texlab.hover is None:
        texlab.hover = dict(DEFAULT_HOVER)


def apply_previewer(
    texlab: TexlabSettings,
    previewer: Previewer,
    command: EditorCommand,
) -> None:
    # A user forwardSearch section overrides the previewer wholesale.
    if texlab.forward_search is not None:
        return
    texlab.forward_search = previewer.create_preset(command)
    if texlab.build is None:
        texlab.build = BuildSettings()
    texlab.build.switch_on_if_unset()


def merge(
    previewer: Previewer | None,
    command: EditorCommand,
    user_settings: Any,
) -> dict[str, Any]:
    """
    Return the workspace settings to send to texlab.

    Parameters
    ----------
    previewer : Previewer | None
        The detected viewer; None leaves forward search untouched.
    command : EditorCommand
        Editor invocation substituted into inverse-search callbacks.
    user_settings : Any
        JSON-like value from the user's ``lsp.texlab.settings``.

    Raises
    ------
    ConfigurationError
        If *user_settings* does not match the settings shape.
    """
    settings = WorkspaceSettings.from_value(user_settings)
    if settings.texlab is None:
        settings.texlab = TexlabSettings()
    texlab = settings.texlab

    apply_build_defaults(texlab)
    apply_hover_defaults(texlab)
    if previewer is not None:
        apply_previewer(texlab, previewer, command)
        logger.debug("Forward search configured for %s", previewer.kind.value)

    return settings.to_dict()
