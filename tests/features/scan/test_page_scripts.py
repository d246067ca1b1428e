from app.features.scan.services.extraction.page_scripts import (
    HELPERS_GLOBAL,
    HIGHLIGHT_MARKER_CLASS,
    HIGHLIGHT_SCRIPT,
    INSTALL_HELPERS_SCRIPT,
    PAGE_HELPERS_VERSION,
)


class TestPageScripts:
    def test_placeholders_are_filled(self):
        assert "__VERSION__" not in INSTALL_HELPERS_SCRIPT
        assert "__MARKER__" not in INSTALL_HELPERS_SCRIPT
        assert "__GLOBAL__" not in INSTALL_HELPERS_SCRIPT
        assert f'const VERSION = "{PAGE_HELPERS_VERSION}"' in INSTALL_HELPERS_SCRIPT
        assert f'const MARKER = "{HIGHLIGHT_MARKER_CLASS}"' in INSTALL_HELPERS_SCRIPT
        assert f"window.{HELPERS_GLOBAL} = " in INSTALL_HELPERS_SCRIPT
        assert f"window.{HELPERS_GLOBAL};" in HIGHLIGHT_SCRIPT

    def test_highlight_rewrites_text_nodes_not_markup(self):
        # Rewriting serialized markup would also match attribute values and the
        # style of earlier highlights
        assert "innerHTML" not in INSTALL_HELPERS_SCRIPT
        assert "outerHTML" not in INSTALL_HELPERS_SCRIPT
        assert "NodeFilter.SHOW_TEXT" in INSTALL_HELPERS_SCRIPT
        assert 'textContent = matchedText' in INSTALL_HELPERS_SCRIPT

    def test_earlier_highlights_are_skipped(self):
        assert 'parent.closest("." + MARKER)' in INSTALL_HELPERS_SCRIPT
