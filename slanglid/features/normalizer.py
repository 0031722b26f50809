"""
Text normalization for detection plus texting-shorthand augmentation for training.
"""
from __future__ import annotations

import re
from typing import Dict, List, Sequence, Tuple

_RE_URL = re.compile(r"https?://\S+")
_RE_EMAIL = re.compile(r"\S+@\S+\.\S+")
_RE_PHONE = re.compile(r"\+?[0-9\s-]{10,}")
_RE_EMOJI = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\u2600-\u26FF"
    "\U0001F900-\U0001F9FF"
    "]"
)
_RE_WHITESPACE = re.compile(r"\s+")
_RE_PUNCTUATION = re.compile(r"[^\w\s]")

# Rules run in order and only match whole words.
_ABBREVIATIONS: Dict[str, Sequence[Tuple[str, str]]] = {
    "es": (
        ("que", "q"),
        ("por", "x"),
        ("porque", "xq"),
        ("para", "pa"),
        ("también", "tmb"),
    ),
    "en": (
        ("you", "u"),
        ("are", "r"),
        ("for", "4"),
        ("before", "b4"),
        ("tomorrow", "tmrw"),
    ),
    "fr": (
        ("salut", "slt"),
        ("bonjour", "bjr"),
        ("bonsoir", "bsr"),
        ("je ne sais pas", "jsp"),
        ("je t'aime", "jtm"),
        ("t'inquiète", "tkt"),
        ("maintenant", "mtn"),
        ("toujours", "tjrs"),
        ("s'il te plaît", "stp"),
        ("s'il vous plaît", "svp"),
        ("pourquoi", "pk"),
        ("beaucoup", "bcp"),
    ),
    "it": (
        ("comunque", "cmq"),
        ("perché", "xké"),
        ("perche", "xche"),
        ("non", "nn"),
        ("che", "ke"),
        ("quando", "qnd"),
        ("quanto", "qnt"),
        ("qualcosa", "qlc"),
        ("qualcuno", "qlcn"),
        ("tutto", "tt"),
        ("ti voglio bene", "tvb"),
        ("grazie", "grz"),
    ),
    "pt": (
        ("voce", "vc"),
        ("você", "vc"),
        ("tambem", "tb"),
        ("também", "tb"),
        ("porque", "pq"),
        ("quando", "qnd"),
        ("quanto", "qnt"),
        ("muito", "mt"),
        ("nada", "nd"),
        ("tudo", "td"),
        ("agora", "agr"),
        ("hoje", "hj"),
        ("depois", "dps"),
        ("beleza", "blz"),
        ("valeu", "vlw"),
        ("obrigado", "obg"),
        ("obrigada", "obg"),
    ),
    "de": (
        ("liebe grüße", "lg"),
        ("liebe gruesse", "lg"),
        ("hab dich lieb", "hdl"),
        ("hab dich ganz doll lieb", "hdgdl"),
        ("gute nacht", "gn8"),
        ("vielleicht", "vllt"),
        ("eventuell", "evtl"),
        ("eigentlich", "eigtl"),
        ("irgendwie", "iwie"),
        ("irgendwann", "iwann"),
        ("irgendwo", "iwo"),
        ("irgendwas", "iwas"),
        ("keine ahnung", "ka"),
        ("kein plan", "kp"),
        ("kein bock", "kb"),
        ("danke", "thx"),
        ("übrigens", "btw"),
        ("auf jeden fall", "auf jeden"),
    ),
}

_ABBREVIATION_PATTERNS: Dict[str, List[Tuple[re.Pattern, str]]] = {
    lang: [
        (re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE), short)
        for phrase, short in rules
    ]
    for lang, rules in _ABBREVIATIONS.items()
}


def normalize_text(text) -> str:
    """
    Lowercase and strip URLs, e-mails, phone numbers and emoji.

    Anything that is not a non-empty string normalizes to ``""``.
    """
    if not text or not isinstance(text, str):
        return ""
    result = text.lower()
    result = _RE_URL.sub("", result)
    result = _RE_EMAIL.sub("", result)
    result = _RE_PHONE.sub("", result)
    result = _RE_EMOJI.sub("", result)
    result = _RE_WHITESPACE.sub(" ", result)
    return result.strip()


def _abbreviate(text: str, language: str) -> str:
    for pattern, short in _ABBREVIATION_PATTERNS.get(language, ()):
        text = pattern.sub(short, text)
    return text


def augment_text(text: str, language: str) -> List[str]:
    """
    Produce synthetic training variants of ``text``.

    The original is always first, followed by its normalized form, a
    punctuation-free form and a texting-shorthand form when they differ.
    """
    variations = [text]

    normalized = normalize_text(text)
    if normalized != text and normalized:
        variations.append(normalized)

    no_punctuation = _RE_PUNCTUATION.sub("", text)
    if no_punctuation != text and no_punctuation:
        variations.append(no_punctuation)

    abbreviated = _abbreviate(text, language)
    if abbreviated != text:
        variations.append(abbreviated)

    return variations


__all__ = ["normalize_text", "augment_text"]
