import re
import unicodedata


def clean_filename(name: str, replacement_char="_"):
    """
    Turn a sample name into a safe file name component: ASCII only, no
    characters outside letters, digits, dots, hyphens and underscores.
    Case is preserved so that sample names stay recognisable.
    """
    # 1. Normalize unicode data, encode to ascii and then decode back to string
    name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")

    # 2. Replace runs of unsafe characters (including whitespace) with the replacement
    name = re.sub(r"[^A-Za-z0-9._-]+", replacement_char, name).strip(replacement_char + ".")

    return name or "sample"
