"""
Nomi file suggeriti per i documenti generati.
"""
import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")
_MULTI_UNDERSCORE = re.compile(r"_+")


def sanitize_filename_part(value: Optional[str]) -> str:
    """'  Pratica Rossi & C. ' -> 'Pratica_Rossi_C'"""
    if not value:
        return ""
    s = _WHITESPACE.sub("_", str(value).strip())
    s = _UNSAFE.sub("", s)
    s = _MULTI_UNDERSCORE.sub("_", s)
    return s.strip("_")


def suggested_filename(
    nome_pratica: Optional[str],
    cliente_nome: Optional[str],
    fallback_id: str,
    extension: str = "pdf",
) -> str:
    """
    Nome file del PDF: pratica_cliente, oppure la sola parte disponibile,
    oppure l'id del documento quando entrambe sono vuote.
    """
    parts = [p for p in (sanitize_filename_part(nome_pratica), sanitize_filename_part(cliente_nome)) if p]
    stem = "_".join(parts) if parts else fallback_id
    return f"{stem}.{extension}"
