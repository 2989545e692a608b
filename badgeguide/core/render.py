from html import escape
import markdown
import nh3

EMPTY_PREVIEW = (
    'Configure your options on the left and click "Generate README" to build your ultimate guide.'
)

_EXTENSIONS = ["tables", "fenced_code", "md_in_html", "sane_lists", "toc"]
_EXTENSION_CONFIGS = {"tables": {"use_align_attribute": True}}

# HTML que el README puede traer: tablas, <details>, imágenes (incluida la hero en data URI)
_ALLOWED_TAGS = set(nh3.ALLOWED_TAGS) | {"details", "summary", "img", "table", "thead", "tbody",
                                         "tr", "th", "td", "div", "span", "br", "hr"}
_ALLOWED_ATTRIBUTES = {
    **{tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()},
    "a": {"href", "title"},
    "img": {"src", "alt", "title", "width", "height", "align"},
    "details": {"open"},
    "th": {"align"},
    "td": {"align"},
    "p": {"align"},
    "div": {"align"},
    **{f"h{i}": {"id"} for i in range(1, 7)},
}
_URL_SCHEMES = {"http", "https", "mailto", "data"}

def _filter_attribute(element: str, attribute: str, value: str):
    # data: solo como imagen
    if value.strip().lower().startswith("data:"):
        if element == "img" and attribute == "src" and value.strip().lower().startswith("data:image/"):
            return value
        return None
    return value

def sanitize_html(html: str) -> str:
    return nh3.clean(
        html,
        tags=_ALLOWED_TAGS,
        attributes=_ALLOWED_ATTRIBUTES,
        url_schemes=_URL_SCHEMES,
        attribute_filter=_filter_attribute,
    )

def markdown_to_html(text: str) -> str:
    md = markdown.Markdown(extensions=_EXTENSIONS, extension_configs=_EXTENSION_CONFIGS)
    return sanitize_html(md.convert(text or ""))

def preview_page(text: str, *, dark: bool, title: str = "README preview") -> str:
    """Documento HTML completo; el tema se aplica con la clase `dark` en <html>."""
    body = markdown_to_html(text) if text else f'<p class="empty">{escape(EMPTY_PREVIEW)}</p>'
    root_class = ' class="dark"' if dark else ""
    return (
        "<!DOCTYPE html>\n"
        f"<html{root_class}>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(title)}</title>\n"
        "</head>\n"
        f'<body>\n<article class="markdown-body">\n{body}\n</article>\n</body>\n'
        "</html>\n"
    )
