import hashlib
import re

TRUNCATION_MARKER = "..."


def resume_hash(resume_text: str) -> str:
    """Content hash used to upsert analyses and ratings for the same resume."""
    return hashlib.sha256((resume_text or "").strip().encode("utf-8")).hexdigest()


def truncate(text: str, max_length: int) -> str:
    text = text or ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + TRUNCATION_MARKER


def strip_html(html: str) -> str:
    text = re.sub(r'<br\s*/?>', '\n', html or "", flags=re.IGNORECASE)
    text = re.sub(r'<[^>]*>', '', text)
    return (text.replace('&nbsp;', ' ')
                .replace('&amp;', '&')
                .replace('&lt;', '<')
                .replace('&gt;', '>')
                .strip())


def word_count(text: str) -> int:
    return len((text or "").split())
