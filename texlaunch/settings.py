"""
Settings schema for the texlab language server and its host block.

Documentation of the texlab keys: https://github.com/latex-lsp/texlab/wiki/Configuration

Only the keys this package reads or fills in are modelled as fields.  Every
other key, at any level, is kept in an ``extra`` mapping and written back
unchanged, so parsing then serialising never loses user configuration.
Unset fields are omitted on output rather than written as null.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from texlaunch.exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Shape checks
# ---------------------------------------------------------------------------

def _mapping(value: Any, key_path: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"expected an object, got {type(value).__name__}", key_path)
    return value


def _string(value: Any, key_path: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise ConfigurationError(
        f"expected a string, got {type(value).__name__}", key_path)


def _string_list(value: Any, key_path: str) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigurationError(
            f"expected a list of strings, got {type(value).__name__}", key_path)
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise ConfigurationError(
                f"expected a string, got {type(item).__name__}", f"{key_path}[{i}]")
    return list(value)


def _boolean(value: Any, key_path: str) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    raise ConfigurationError(
        f"expected true or false, got {type(value).__name__}", key_path)


def _string_map(value: Any, key_path: str) -> dict[str, str] | None:
    data = _mapping(value, key_path)
    if data is None:
        return None
    for k, v in data.items():
        _string(v, f"{key_path}.{k}")
    return dict(data)


def _compact(fields: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    out = dict(extra)
    out.update({k: v for k, v in fields.items() if v is not None})
    return out


# ---------------------------------------------------------------------------
# texlab workspace settings
# ---------------------------------------------------------------------------

@dataclass
class ForwardSearchSettings:
    """``texlab.forwardSearch``: how texlab launches the PDF viewer."""
    executable: str | None = None
    args: list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, key_path: str = "texlab.forwardSearch") -> ForwardSearchSettings | None:
        data = _mapping(data, key_path)
        if data is None:
            return None
        rest = {k: v for k, v in data.items() if k not in ("executable", "args")}
        return cls(
            executable=_string(data.get("executable"), f"{key_path}.executable"),
            args=_string_list(data.get("args"), f"{key_path}.args"),
            extra=rest,
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"executable": self.executable,
             "args": list(self.args) if self.args is not None else None},
            self.extra,
        )


_BUILD_KEYS = ("executable", "args", "forwardSearchAfter", "onSave")


@dataclass
class BuildSettings:
    """``texlab.build``.  useFileList, auxDirectory and friends pass through."""
    executable: str | None = None
    args: list[str] | None = None
    forward_search_after: bool | None = None
    on_save: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, key_path: str = "texlab.build") -> BuildSettings | None:
        data = _mapping(data, key_path)
        if data is None:
            return None
        return cls(
            executable=_string(data.get("executable"), f"{key_path}.executable"),
            args=_string_list(data.get("args"), f"{key_path}.args"),
            forward_search_after=_boolean(
                data.get("forwardSearchAfter"), f"{key_path}.forwardSearchAfter"),
            on_save=_boolean(data.get("onSave"), f"{key_path}.onSave"),
            extra={k: v for k, v in data.items() if k not in _BUILD_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"executable": self.executable,
             "args": list(self.args) if self.args is not None else None,
             "forwardSearchAfter": self.forward_search_after,
             "onSave": self.on_save},
            self.extra,
        )

    def switch_on_if_unset(self) -> None:
        """Enable build-on-save and forward-search-after-build unless set."""
        if self.forward_search_after is None:
            self.forward_search_after = True
        if self.on_save is None:
            self.on_save = True


_TEXLAB_KEYS = ("build", "forwardSearch", "hover")


@dataclass
class TexlabSettings:
    """
    The ``texlab`` section.

    chktex, diagnostics, symbols, formatters, completion, inlayHints,
    experimental and any key texlab adds later are carried in ``extra``.
    """
    build: BuildSettings | None = None
    forward_search: ForwardSearchSettings | None = None
    hover: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, key_path: str = "texlab") -> TexlabSettings | None:
        data = _mapping(data, key_path)
        if data is None:
            return None
        return cls(
            build=BuildSettings.from_dict(data.get("build"), f"{key_path}.build"),
            forward_search=ForwardSearchSettings.from_dict(
                data.get("forwardSearch"), f"{key_path}.forwardSearch"),
            hover=_mapping(data.get("hover"), f"{key_path}.hover"),
            extra={k: v for k, v in data.items() if k not in _TEXLAB_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"build": self.build.to_dict() if self.build else None,
             "forwardSearch": self.forward_search.to_dict() if self.forward_search else None,
             "hover": dict(self.hover) if self.hover is not None else None},
            self.extra,
        )


@dataclass
class WorkspaceSettings:
    """Top level of the workspace configuration sent to texlab."""
    texlab: TexlabSettings | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> WorkspaceSettings:
        """
        Parse a loosely typed settings value.

        ``None`` means no settings.  A value of the wrong shape raises
        ConfigurationError naming the offending key.
        """
        data = _mapping(value, "settings")
        if data is None:
            return cls()
        return cls(
            texlab=TexlabSettings.from_dict(data.get("texlab")),
            extra={k: v for k, v in data.items() if k != "texlab"},
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"texlab": self.texlab.to_dict() if self.texlab else None},
            self.extra,
        )


# ---------------------------------------------------------------------------
# Host block (``lsp.texlab`` in the editor settings)
# ---------------------------------------------------------------------------

@dataclass
class BinarySettings:
    """User override for the language server executable."""
    path: str | None = None
    arguments: list[str] | None = None
    env: dict[str, str] | None = None


@dataclass
class LspSettings:
    """Per-server block: binary override, workspace settings, init options."""
    binary: BinarySettings | None = None
    settings: Any = None
    initialization_options: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> LspSettings:
        data = _mapping(data, "lsp.texlab")
        if data is None:
            return cls()
        binary = None
        raw_binary = _mapping(data.get("binary"), "lsp.texlab.binary")
        if raw_binary is not None:
            binary = BinarySettings(
                path=_string(raw_binary.get("path"), "lsp.texlab.binary.path"),
                arguments=_string_list(
                    raw_binary.get("arguments"), "lsp.texlab.binary.arguments"),
                env=_string_map(raw_binary.get("env"), "lsp.texlab.binary.env"),
            )
        return cls(
            binary=binary,
            # Validated lazily by the merge so that a broken settings block
            # does not prevent the server from launching.
            settings=data.get("settings"),
            initialization_options=_mapping(
                data.get("initialization_options"),
                "lsp.texlab.initialization_options"),
        )

    def extra_tex_inputs(self) -> list[str]:
        """Directories listed under ``initialization_options.extra_tex_inputs``."""
        opts = self.initialization_options or {}
        raw = opts.get("extra_tex_inputs")
        key_path = "lsp.texlab.initialization_options.extra_tex_inputs"
        if isinstance(raw, str):
            return [raw]
        return _string_list(raw, key_path) or []
