"""Centralized theme tokens for the Gizmo Installer UI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ThemeColors:
    """Color palette tokens."""

    window_bg: str
    text_primary: str
    brand_primary: str
    next_enabled: str
    next_disabled: str
    error: str
    surface: str
    border: str
    text_inverted: str


@dataclass(frozen=True)
class ThemeTypography:
    """Typography tokens."""

    title_size_px: int
    heading_size_px: int
    launcher_title_size_px: int
    title_weight: int
    heading_weight: int


@dataclass(frozen=True)
class GizmoTheme:
    """BEST Gizmo theme tokens."""

    colors: ThemeColors
    typography: ThemeTypography
    button_padding: str
    button_radius_px: int

    def qss(self) -> str:
        """Build the QSS stylesheet for the theme."""
        return f"""
        QMainWindow {{
            background-color: {self.colors.window_bg};
            color: {self.colors.text_primary};
        }}
        #headerBar {{
            background-color: {self.colors.brand_primary};
        }}
        #flowTitle {{
            color: {self.colors.text_inverted};
            font-size: {self.typography.title_size_px}px;
            font-weight: {self.typography.title_weight};
        }}
        #startOverButton {{
            background-color: {self.colors.surface};
            color: {self.colors.text_primary};
            padding: {self.button_padding};
            border-radius: {self.button_radius_px}px;
        }}
        #launcherTitle {{
            font-size: {self.typography.launcher_title_size_px}px;
            font-weight: {self.typography.title_weight};
        }}
        #stepHeading {{
            font-size: {self.typography.heading_size_px}px;
            font-weight: {self.typography.heading_weight};
        }}
        #validationMessage {{
            color: {self.colors.error};
        }}
        QPushButton#nextButton {{
            background-color: {self.colors.next_enabled};
            color: {self.colors.text_inverted};
            border: none;
            padding: {self.button_padding};
            border-radius: {self.button_radius_px}px;
            font-weight: {self.typography.heading_weight};
        }}
        QPushButton#nextButton:disabled {{
            background-color: {self.colors.next_disabled};
        }}
        QPushButton#flowButton {{
            min-width: 150px;
            min-height: 150px;
            border: 1px solid {self.colors.border};
            border-radius: {self.button_radius_px}px;
            background-color: {self.colors.surface};
        }}
        QPushButton#flowButton:hover {{
            border-color: {self.colors.brand_primary};
        }}
        """


GIZMO_THEME = GizmoTheme(
    colors=ThemeColors(
        window_bg="#f8f8f8",
        text_primary="#1b1b1b",
        brand_primary="#001E62",
        next_enabled="#71CC98",
        next_disabled="#A0A0A0",
        error="#8b0000",
        surface="#ffffff",
        border="#c8c8c8",
        text_inverted="#ffffff",
    ),
    typography=ThemeTypography(
        title_size_px=18,
        heading_size_px=18,
        launcher_title_size_px=22,
        title_weight=700,
        heading_weight=600,
    ),
    button_padding="6px 14px",
    button_radius_px=4,
)


def gizmo_qss() -> str:
    """Return the QSS for the Gizmo theme."""
    return GIZMO_THEME.qss()
