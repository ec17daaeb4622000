"""
HTTP header helpers: RFC 5987 Content-Disposition for accented filenames.
Starlette headers are latin-1 only, so the plain filename carries an ASCII
fallback and filename*=UTF-8''... carries the real name for browsers.
"""
import re
import unicodedata
from urllib.parse import quote


def ascii_filename(name: str) -> str:
    """"Diárias do Período.xlsx" -> "Diarias_do_Periodo.xlsx"."""
    plain = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    plain = re.sub(r"[^A-Za-z0-9._-]+", "_", plain).strip("_")
    return plain or "download"


def build_content_disposition(ascii_name: str, unicode_name: str) -> str:
    """
    Content-Disposition value with both forms, e.g.

        build_content_disposition("Escalas_de_Servico.xlsx", "Escalas de Serviço.xlsx")
    """
    ascii_part = f'attachment; filename="{ascii_name}"'
    encoded = quote(unicode_name, safe="")
    return f"{ascii_part}; filename*=UTF-8''{encoded}"
