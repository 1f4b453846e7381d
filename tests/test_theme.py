"""Tests for the YAML colour theme."""

import pytest

from tui_gantt import theme


@pytest.fixture(autouse=True)
def reset_theme():
    yield
    theme.load_theme()


class TestDefaultTheme:
    def test_loaded(self):
        assert theme.GANTT_BAR == theme.ColorPair("#7aa2f7", "#2e7de9")
        assert theme.GANTT_BAR.resolve(True) == "#7aa2f7"
        assert theme.GANTT_BAR.resolve(False) == "#2e7de9"

    def test_bar_color(self):
        assert theme.bar_color("", False) == theme.GANTT_BAR
        assert theme.bar_color("critical", False) == theme.CUSTOM_BARS["critical"]
        assert theme.bar_color("unknown", False) == theme.GANTT_BAR
        assert theme.bar_color("critical", True) == theme.GANTT_BAR_INVALID


class TestProjectTheme:
    def test_override_merges(self, tmp_path):
        override = tmp_path / ".tui-gantt" / "theme.yaml"
        override.parent.mkdir()
        override.write_text(
            "gantt:\n"
            "  bar: { dark: red }\n"
            "custom:\n"
            "  milestone: { dark: green, light: darkgreen }\n",
            encoding="utf-8",
        )
        theme.load_theme(tmp_path)
        assert theme.GANTT_BAR == theme.ColorPair("red", "black")
        assert theme.GANTT_HEADER.dark == "#c0caf5"
        assert theme.bar_color("milestone", False).light == "darkgreen"
        assert "critical" in theme.CUSTOM_BARS

    def test_broken_override_ignored(self, tmp_path):
        override = tmp_path / ".tui-gantt" / "theme.yaml"
        override.parent.mkdir()
        override.write_text("gantt: [", encoding="utf-8")
        theme.load_theme(tmp_path)
        assert theme.GANTT_BAR.dark == "#7aa2f7"

    def test_init_theme(self, tmp_path):
        dest = theme.init_theme(tmp_path)
        assert dest == tmp_path / ".tui-gantt" / "theme.yaml"
        assert "gantt:" in dest.read_text(encoding="utf-8")
        with pytest.raises(FileExistsError):
            theme.init_theme(tmp_path)
