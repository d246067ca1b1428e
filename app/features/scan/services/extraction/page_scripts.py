"""
Page-side helper payload.

Installed once per page load by the text extractor and consumed by the DOM
injector. Bump PAGE_HELPERS_VERSION whenever the script changes; the version is
recorded in each run's debugging info.
"""

PAGE_HELPERS_VERSION = "3"
HELPERS_GLOBAL = "__textScanHelpers"
HIGHLIGHT_MARKER_CLASS = "textscan-highlight"

_INSTALL_TEMPLATE = r"""
const VERSION = "__VERSION__";
const MARKER = "__MARKER__";
const existing = window.__GLOBAL__;
if (existing && existing.version === VERSION) {
    return VERSION;
}

// Smallest element (by rendered area) whose innerText contains searchText.
// Ties keep document order.
function findLowestElementWithText(root, searchText) {
    let best = null;

    function traverse(node) {
        if (node.nodeType !== Node.ELEMENT_NODE) {
            return;
        }
        const text = node.innerText;
        if (!text || !text.includes(searchText)) {
            return;
        }
        const rect = node.getBoundingClientRect();
        const area = rect.width * rect.height;
        if (area > 0 && (best === null || area < best.area)) {
            best = {
                element: node,
                area: area,
                coordinates: {
                    x: Math.round(rect.x + window.scrollX),
                    y: Math.round(rect.y + window.scrollY),
                    width: Math.round(rect.width),
                    height: Math.round(rect.height),
                },
            };
        }
        for (const child of node.children) {
            traverse(child);
        }
    }

    traverse(root);
    return best;
}

// Visible text nodes only: attributes, scripts and earlier highlights are never rewritten.
function highlightableTextNodes(root) {
    const nodes = [];
    const walker = document.createTreeWalker(root, NodeFilter.SHOW_TEXT, {
        acceptNode: (textNode) => {
            const parent = textNode.parentElement;
            if (!parent || parent.closest("." + MARKER)) {
                return NodeFilter.FILTER_REJECT;
            }
            const tag = parent.tagName;
            if (tag === "SCRIPT" || tag === "STYLE" || tag === "NOSCRIPT" || tag === "TEXTAREA") {
                return NodeFilter.FILTER_REJECT;
            }
            return NodeFilter.FILTER_ACCEPT;
        },
    });
    while (walker.nextNode()) {
        nodes.push(walker.currentNode);
    }
    return nodes;
}

function buildHighlight(matchedText, style) {
    const outer = document.createElement("span");
    outer.style.position = "relative";
    outer.style.display = "inline-block";

    const inner = document.createElement("span");
    inner.className = MARKER;
    inner.style.textDecorationLine = "underline";
    inner.style.textDecorationStyle = "solid";
    inner.style.textDecorationColor = style.color;
    inner.style.textDecorationThickness = "3px";
    inner.style.backgroundColor = style.background;
    inner.textContent = matchedText;

    outer.appendChild(inner);
    return outer;
}

function highlightText(searchText, style) {
    if (!searchText) {
        return { success: false, coordinates: null };
    }
    const match = findLowestElementWithText(document.body, searchText);
    if (!match) {
        return { success: false, coordinates: null };
    }

    // Case-insensitive, every occurrence, special characters literal
    const pattern = new RegExp(searchText.replace(/[.*+?^${}()|[\]\\]/g, "\\$&"), "gi");
    let wrapped = 0;

    // Nodes are collected before mutating so the walk is not disturbed
    for (const textNode of highlightableTextNodes(match.element)) {
        const text = textNode.data;
        const fragment = document.createDocumentFragment();
        let last = 0;
        let hits = 0;
        let found;

        pattern.lastIndex = 0;
        while ((found = pattern.exec(text)) !== null) {
            fragment.appendChild(document.createTextNode(text.slice(last, found.index)));
            fragment.appendChild(buildHighlight(found[0], style));
            last = found.index + found[0].length;
            hits += 1;
        }
        if (hits === 0) {
            continue;
        }
        fragment.appendChild(document.createTextNode(text.slice(last)));
        textNode.parentNode.replaceChild(fragment, textNode);
        wrapped += hits;
    }

    return {
        success: wrapped > 0,
        coordinates: match.coordinates,
    };
}

window.__GLOBAL__ = {
    version: VERSION,
    findLowestElementWithText: findLowestElementWithText,
    highlightText: highlightText,
};
return VERSION;
"""

INSTALL_HELPERS_SCRIPT = (
    _INSTALL_TEMPLATE
    .replace("__VERSION__", PAGE_HELPERS_VERSION)
    .replace("__MARKER__", HIGHLIGHT_MARKER_CLASS)
    .replace("__GLOBAL__", HELPERS_GLOBAL)
)

READ_BODY_TEXT_SCRIPT = "return document.body ? document.body.innerText : '';"

HIGHLIGHT_SCRIPT = (
    "const helpers = window.__GLOBAL__;"
    "if (!helpers) { return { success: false, coordinates: null }; }"
    "return helpers.highlightText(arguments[0], arguments[1]);"
).replace("__GLOBAL__", HELPERS_GLOBAL)
