import re
import unicodedata


def parameterize(text: str, separator: str = "-") -> str:
    """URL-safe slug: ASCII-folded, lowercased, runs of other chars collapsed."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9\-_]+", separator, ascii_text.lower())
    slug = re.sub(rf"{re.escape(separator)}{{2,}}", separator, slug)
    return slug.strip(separator)
