"""Shared UI style helpers for windows, icon grids and dialogs."""

APP_BG = "#eceff3"
CARD_BG = "#f9fafc"
GROUP_BORDER = "#dfe3e8"
TEXT_PRIMARY = "#2b3035"
TEXT_TITLE = "#0f1115"
BODY_FONT_SIZE = "14px"
HEADING_FONT_SIZE = 15.0
MENU_BG = "#2d333d"
MENU_BG_HOVER = "#3a414c"
MENU_FG = "#f5f7fb"
TABLE_BG = "#ffffff"
TABLE_ALT_BG = "#f6f7f9"
SELECT_BG = "#dbe7ff"
SELECT_FG = "#1c2230"
BUTTON_BG_GRADIENT = "qlineargradient(x1:0, y1:0, x2:0, y2:1, stop:0 #fdfefe, stop:1 #edf2f8)"
BUTTON_BG_HOVER = "#edf1f7"
BUTTON_BORDER_STRONG = "#c5ced9"
TITLE_STYLE_BASE = f"font-weight: 700; color: {TEXT_TITLE}; background: transparent;"

# Marker drawn on the drift preview for the placed point
POINT_MARKER_COLOR = "#ff3b30"
POINT_MARKER_RADIUS = 6


def card_style(object_name: str) -> str:
    return (
        f"#{object_name} {{ background: {CARD_BG}; border-radius: 8px; }}"
        f"#{object_name} QLabel {{ color: {TEXT_PRIMARY}; font-size: {BODY_FONT_SIZE}; background: transparent; }}"
    )


def heading_style(size: float = HEADING_FONT_SIZE) -> str:
    """Shared heading style for panel titles."""
    return f"font-size: {size}px; {TITLE_STYLE_BASE}"


def icon_view_style() -> str:
    return (
        f"QListWidget {{ background: {TABLE_BG}; border: 1px solid {GROUP_BORDER}; border-radius: 6px; }}"
        f"QListWidget::item {{ color: {TEXT_PRIMARY}; padding: 4px; }}"
        f"QListWidget::item:selected {{ background: {SELECT_BG}; color: {SELECT_FG}; }}"
    )


def table_widget_style() -> str:
    return (
        f"QTableWidget {{ background: {TABLE_BG}; alternate-background-color: {TABLE_ALT_BG};"
        f" color: {TEXT_PRIMARY}; selection-background-color: {SELECT_BG};"
        f" selection-color: {SELECT_FG}; gridline-color: {GROUP_BORDER}; }}"
    )


def app_stylesheet() -> str:
    """Application-wide stylesheet with consistent background and text colors."""
    return (
        f"QMainWindow {{ background: {APP_BG}; color: {TEXT_PRIMARY}; font-size: {BODY_FONT_SIZE}; }}"
        f"QDialog {{ background: {APP_BG}; color: {TEXT_PRIMARY}; font-size: {BODY_FONT_SIZE}; }}"
        f"QLabel {{ color: {TEXT_PRIMARY}; background: transparent; font-size: {BODY_FONT_SIZE}; }}"
        f"QMenuBar {{ background: {MENU_BG}; color: {MENU_FG}; }}"
        f"QMenuBar::item:selected {{ background: {MENU_BG_HOVER}; color: {MENU_FG}; }}"
        f"QMenu {{ background: {MENU_BG}; color: {MENU_FG}; }}"
        f"QMenu::item:selected {{ background: {MENU_BG_HOVER}; color: {MENU_FG}; }}"
        f"QPushButton {{ color: {TEXT_PRIMARY}; background: {BUTTON_BG_GRADIENT};"
        f" border: 1px solid {BUTTON_BORDER_STRONG}; border-radius: 6px; padding: 5px 10px;"
        f" min-height: 24px; font-size: {BODY_FONT_SIZE}; }}"
        f"QPushButton:hover {{ background: {BUTTON_BG_HOVER}; border-color: {TEXT_TITLE}; }}"
        f"QPushButton:disabled {{ color: #8d95a3; background: #f3f4f6; border-color: {GROUP_BORDER}; }}"
    )


def apply_app_style(app) -> None:
    """Apply the shared stylesheet to the given QApplication instance."""
    app.setStyleSheet(app_stylesheet())
