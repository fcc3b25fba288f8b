"""Static registry of supported editors and where they live on disk.

Each ``EditorDescriptor`` describes one VS Code-family editor: its app
bundle name, the CLI binary bundled inside it, the platform tag sent to
the Corridor API, and the per-user extensions directory. All paths are
derived through a ``HostLayout`` so that detection, CLI resolution and
the extension-directory fallback share one table instead of three
parallel lookups.

Install Locations (first match wins):
    standard     ``/Applications/<App>.app``
    alternative  ``/Users/<user>/Downloads/<App>.app`` (VS Code is often
                 run straight from the download folder)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Location of the CLI inside an Electron app bundle.
BUNDLED_CLI_DIR: str = "Contents/Resources/app/bin"

# Per-user root for Corridor configuration, relative to the home directory.
CONFIG_ROOT_NAME: str = ".corridor"


@dataclass(frozen=True)
class HostLayout:
    """Filesystem roots for the current platform.

    Attributes:
        applications_dir: System-wide application directory.
        home_root: Directory containing user home directories.
    """

    applications_dir: Path = Path("/Applications")
    home_root: Path = Path("/Users")

    def home(self, username: str) -> Path:
        return self.home_root / username

    def downloads(self, username: str) -> Path:
        return self.home(username) / "Downloads"

    def config_root(self, username: str) -> Path:
        """Per-user Corridor configuration root (``~/.corridor``)."""
        return self.home(username) / CONFIG_ROOT_NAME


MACOS_LAYOUT = HostLayout()


@dataclass(frozen=True)
class EditorDescriptor:
    """Describes one supported editor.

    Attributes:
        name: Identifier used in logs (e.g., "VSCode").
        platform_tag: Stable lowercase tag sent to the API and used as a
            directory name under the Corridor config root.
        app_bundle: App bundle directory name (e.g., "Cursor.app").
        cli_name: CLI binary name inside the bundle.
        extensions_dir: Extensions directory, relative to the user's home.
    """

    name: str
    platform_tag: str
    app_bundle: str
    cli_name: str
    extensions_dir: str

    def standard_path(self, layout: HostLayout) -> Path:
        return layout.applications_dir / self.app_bundle

    def alternative_path(self, layout: HostLayout, username: str) -> Path:
        return layout.downloads(username) / self.app_bundle

    def cli_path(self, install_location: Path) -> Path:
        """Path of the CLI bundled in the app at ``install_location``."""
        return install_location / BUNDLED_CLI_DIR / self.cli_name

    def extension_dir_path(self, layout: HostLayout, username: str) -> Path:
        """User's extensions directory, used only as an installed-check."""
        return layout.home(username) / self.extensions_dir


def _build_editors() -> list[EditorDescriptor]:
    """Build the list of supported editors, in provisioning order."""
    return [
        EditorDescriptor(
            name="Cursor",
            platform_tag="cursor",
            app_bundle="Cursor.app",
            cli_name="cursor",
            extensions_dir=".cursor/extensions",
        ),
        EditorDescriptor(
            name="VSCode",
            platform_tag="vscode",
            app_bundle="Visual Studio Code.app",
            cli_name="code",
            extensions_dir=".vscode/extensions",
        ),
        EditorDescriptor(
            name="Windsurf",
            platform_tag="windsurf",
            app_bundle="Windsurf.app",
            cli_name="windsurf",
            extensions_dir=".windsurf/extensions",
        ),
    ]


# Module-level constant: the canonical, ordered editor registry.
EDITORS: list[EditorDescriptor] = _build_editors()
