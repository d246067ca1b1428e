from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class HighlightStyle:
    color: str
    background: str

    def as_js(self) -> Dict[str, str]:
        return {"color": self.color, "background": self.background}


SEVERITY_STYLES: Dict[str, HighlightStyle] = {
    "critical": HighlightStyle(color="rgba(220,38,38,1)", background="rgba(220,38,38,0.2)"),  # red-600
    "important": HighlightStyle(color="rgba(217,119,6,1)", background="rgba(217,119,6,0.2)"),  # amber-600
    "minor": HighlightStyle(color="rgba(37,99,235,1)", background="rgba(37,99,235,0.2)"),  # blue-600
}

DEFAULT_STYLE = SEVERITY_STYLES["minor"]


def style_for_severity(severity) -> HighlightStyle:
    """Total over any input: unknown severities get the minor palette."""
    key = getattr(severity, "value", severity)
    return SEVERITY_STYLES.get(key, DEFAULT_STYLE)
