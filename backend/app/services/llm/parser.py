"""
Recovering Parser — estrae un valore JSON dal testo libero di un LLM.

I modelli violano spesso il contratto "solo JSON": preambolo conversazionale,
blocchi markdown, commenti in coda, oggetti troncati dal limite di token.
extract_json() prova strategie via via più aggressive e restituisce il primo
valore strutturato (dict o list) ottenuto, oppure None.

Non solleva mai eccezioni: None è il segnale di fallimento per il chiamante.
Nessuno stato, nessun I/O a parte il logging diagnostico.
"""
import json
import logging
import re

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)

# Lunghezza del frammento di testo riportato nei log diagnostici
_LOG_PREVIEW = 300


def _loads_structured(text: str) -> dict | list | None:
    """json.loads che accetta solo oggetti e array."""
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if isinstance(value, (dict, list)):
        return value
    return None


def _balanced_end(text: str, start: int) -> int | None:
    """
    Indice della '}' che chiude la '{' in posizione start, oppure None.

    Le parentesi dentro stringhe JSON (escape compresi) non contano.
    """
    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def repair_truncated(fragment: str) -> str:
    """
    Chiude un oggetto JSON troncato aggiungendo le parentesi mancanti.

    Conteggio semplice (non string-aware): prima le ']' poi le '}'.

    Limite noto: l'ordine fisso non segue l'annidamento reale. Un taglio
    dentro un oggetto di una lista ('{"places": [{"name": "A"') diventa
    '...]}}', che non è JSON valido: la risposta resta testo grezzo.
    """
    missing_brackets = fragment.count("[") - fragment.count("]")
    missing_braces = fragment.count("{") - fragment.count("}")
    return fragment + "]" * max(missing_brackets, 0) + "}" * max(missing_braces, 0)


def extract_json(raw: str) -> dict | list | None:
    """
    Converte una risposta LLM in dict/list.

    Strategie, in ordine (vince la prima che riesce):
      1. parse diretto del testo ripulito dagli spazi
      2. contenuto del primo blocco ```json ... ```
      3. dalla prima '{', sottostringa bilanciata (ignora il commento in coda)
      4. dalla prima '{' fino alla fine, con riparazione del troncamento

    Returns:
        Il valore estratto, oppure None se nessuna strategia riesce.
    """
    if not raw:
        return None

    value = _loads_structured(raw.strip())
    if value is not None:
        return value

    fence = _FENCE_RE.search(raw)
    if fence:
        value = _loads_structured(fence.group(1).strip())
        if value is not None:
            return value

    start = raw.find("{")
    if start == -1:
        logger.warning("Nessun oggetto JSON nella risposta: %s", raw[:_LOG_PREVIEW])
        return None

    end = _balanced_end(raw, start)
    if end is not None:
        value = _loads_structured(raw[start:end + 1])
        if value is None:
            logger.warning("Estrazione bilanciata non parsabile: %s", raw[start:start + _LOG_PREVIEW])
        return value

    repaired = repair_truncated(raw[start:])
    value = _loads_structured(repaired)
    if value is None:
        logger.warning("Riparazione JSON troncato fallita: %s", raw[start:start + _LOG_PREVIEW])
    else:
        logger.debug("Risposta troncata riparata (%d caratteri aggiunti)", len(repaired) - len(raw) + start)
    return value


def extract_json_array(raw: str) -> list | None:
    """
    Estrae un array JSON (usato per la classificazione degli intent).

    Rimuove i fence markdown e prende lo span dalla prima '[' all'ultima ']'.
    """
    if not raw:
        return None
    cleaned = raw.replace("```json", "").replace("```", "").strip()
    match = _ARRAY_RE.search(cleaned)
    if not match:
        return None
    value = _loads_structured(match.group(0))
    return value if isinstance(value, list) else None
