"""
iCalendar Content Line Format (RFC 5545 §3.1)
=============================================

Layout:
    NAME *(";" PARAM-NAME "=" PARAM-VALUE *("," PARAM-VALUE)) ":" VALUE CRLF

    BEGIN:VCALENDAR                         <- name ":" value
    X-TEST;LIST=plain,"quoted; text":value  <- parameters, value list
    DESCRIPTION:a line longer than seventy-  <- physical line, 75 octets max
     five octets continues here             <- CRLF SPACE continuation

Grammar productions enforced by the writers:
    name          = iana-token / x-name
    iana-token    = 1*(ALPHA / DIGIT / "-")

    paramtext     = *SAFE-CHAR
    SAFE-CHAR     = WSP / %x21 / %x23-2B / %x2D-39 / %x3C-7E / NON-US-ASCII
                  ; Any character except CONTROL, DQUOTE, ";", ":", ","

    quoted-string = DQUOTE *QSAFE-CHAR DQUOTE
    QSAFE-CHAR    = WSP / %x21 / %x23-7E / NON-US-ASCII
                  ; Any character except CONTROL and DQUOTE

    VALUE-CHAR    = WSP / %x21-7E / NON-US-ASCII
    CONTROL       = %x00-08 / %x0A-1F / %x7F
                  ; All the controls except HTAB

Folding:
    - Physical lines hold at most 75 octets, not counting the CRLF
    - A continuation is CRLF followed by one SPACE; the SPACE counts against
      the budget of the next physical line (74 octets left after it)
    - Folds land on UTF-8 codepoint boundaries, never inside a codepoint
      (grapheme clusters may still be split)

TEXT escaping (RFC 5545 §3.3.11):
    "\\" -> "\\\\",  LF -> "\\n",  ";" -> "\\;",  "," -> "\\,"
    Other value types never contain these characters, so the escaping is
    applied to every value slot.
"""

# Line structure
MAX_LINE_LENGTH = 75
CRLF = "\r\n"
CONTINUATION = "\r\n "
CONTINUATION_LINE_LENGTH = MAX_LINE_LENGTH - 1

# Punctuation of a content line
PARAM_SEPARATOR = ";"
PARAM_ASSIGN = "="
PARAM_VALUE_SEPARATOR = ","
VALUE_SEPARATOR = ":"
TUPLE_SEPARATOR = ";"
LIST_SEPARATOR = ","
DQUOTE = '"'

# Component delimiters
BEGIN = "BEGIN"
END = "END"

# Parameter selecting a non-default value type
VALUE_PARAM = "VALUE"

ICALENDAR_VERSION = "2.0"
DEFAULT_PRODID = "-//icsgen//icsgen//EN"

# Longest UTF-8 sequence is 4 octets: at most 3 continuation bytes to step over
MAX_UTF8_CONTINUATION_BYTES = 3

ALLOWED_NAME_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-"
)
PARAMTEXT_EXCLUDED = frozenset('";:,')
QSAFE_EXCLUDED = frozenset('"')

TEXT_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    ";": "\\;",
    ",": "\\,",
}
TEXT_UNESCAPES = {
    "\\": "\\",
    "n": "\n",
    "N": "\n",
    ";": ";",
    ",": ",",
}

# File extension
EXTENSION = ".ics"
MEDIA_TYPE = "text/calendar"


def is_control(c: str) -> bool:
    """CONTROL from the grammar: every C0 control and DEL, except HTAB."""
    o = ord(c)
    return o == 0x7F or (o < 0x20 and c != "\t")


def is_control_byte(b: int) -> bool:
    return b == 0x7F or (b < 0x20 and b != 0x09)


def is_name_char(c: str) -> bool:
    return c in ALLOWED_NAME_CHARS


def is_safe_char(c: str) -> bool:
    """SAFE-CHAR: paramtext without quoting."""
    return not is_control(c) and c not in PARAMTEXT_EXCLUDED


def is_qsafe_char(c: str) -> bool:
    """QSAFE-CHAR: contents of a quoted-string."""
    return not is_control(c) and c not in QSAFE_EXCLUDED


def needs_quoting(value: str) -> bool:
    """True if a parameter value can only be written as a quoted-string."""
    return any(c in PARAMTEXT_EXCLUDED for c in value)


def escape_text(text: str) -> str:
    """Escape a TEXT value. Characters outside TEXT_ESCAPES pass through."""
    return "".join(TEXT_ESCAPES.get(c, c) for c in text)


def unescape_text(text: str) -> str:
    """Reverse escape_text. Accepts both "\\n" and "\\N" for a newline.

    A backslash followed by anything else is kept as-is.
    """
    out = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\" and i + 1 < len(text) and text[i + 1] in TEXT_UNESCAPES:
            out.append(TEXT_UNESCAPES[text[i + 1]])
            i += 2
            continue
        out.append(c)
        i += 1
    return "".join(out)


def unfold(folded: str) -> str:
    """Remove every CRLF SPACE continuation from folded text."""
    return folded.replace(CONTINUATION, "")


def check_physical_lines(data: bytes) -> list[str]:
    """
    Lint the physical layer of .ics bytes. Returns a list of problems.

    Checks CRLF line endings, at most MAX_LINE_LENGTH octets per physical
    line, UTF-8 validity and the absence of control bytes other than HTAB.
    Content is not parsed.
    """
    problems: list[str] = []
    if not data:
        return ["file is empty"]
    if not data.endswith(CRLF.encode("ascii")):
        problems.append("file does not end with CRLF")

    for number, line in enumerate(data.split(b"\r\n"), start=1):
        if b"\n" in line or b"\r" in line:
            problems.append(f"line {number}: bare CR or LF")
        if len(line) > MAX_LINE_LENGTH:
            problems.append(f"line {number}: {len(line)} octets (max {MAX_LINE_LENGTH})")
        bad = sorted({b for b in line if is_control_byte(b) and b not in (0x0A, 0x0D)})
        if bad:
            shown = ", ".join(f"0x{b:02X}" for b in bad)
            problems.append(f"line {number}: control bytes {shown}")
        try:
            line.decode("utf-8")
        except UnicodeDecodeError:
            problems.append(f"line {number}: not valid UTF-8")
    return problems
