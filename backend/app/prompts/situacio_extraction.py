"""Prompt and response schema for Situació d'Aprenentatge extraction."""

SITUACIO_SYSTEM_PROMPT = """Ets un assistent expert en la LOMLOE i el currículum de la Generalitat de Catalunya.
Analitza el text del docent i genera una Situació d'Aprenentatge oficial en format JSON seguint el model de la Generalitat."""

SITUACIO_EXTRACTION_PROMPT = """IMPORTANT:
- Títol: Significatiu i engrescador.
- Competències específiques: com a mínim una, amb l'àrea o matèria corresponent.
- Objectius: Estructura "Infinitiu + Saber + Finalitat".
- Criteris d'avaluació: Estructura "Acció + Saber + Context".
- Fases: Omple les 4 fases d'activitats (Inicial, Desenvolupament, Estructuració, Aplicació), cadascuna amb descripció i temporització.
- Suports addicionals: només si el text menciona alumnes concrets; si no, deixa la llista buida.
- Si falta informació al text, inventa-la perquè sigui pedagògicament coherent.

TEXT A ANALITZAR:
{text}"""


def _string() -> dict:
    return {"type": "string"}


def _object(properties: dict, required: list[str] | None = None) -> dict:
    return {
        "type": "object",
        "properties": properties,
        "required": required if required is not None else list(properties),
    }


def _activity() -> dict:
    return _object({"descripcio": _string(), "temporitzacio": _string()})


SITUACIO_RESPONSE_SCHEMA = _object({
    "identificacio": _object({
        "titol": _string(),
        "curs": _string(),
        "area_materia_ambit": _string(),
    }),
    "descripcio": _object({
        "context_repte": _string(),
        "competencies_transversals": _string(),
    }),
    "concrecio_curricular": _object({
        "competencies_especifiques": {
            "type": "array",
            "items": _object({"descripcio": _string(), "area_materia": _string()}),
        },
        "objectius": {"type": "array", "items": _string()},
        "criteris_avaluacio": {"type": "array", "items": _string()},
        "sabers": {
            "type": "array",
            "items": _object({"saber": _string(), "area_materia": _string()}),
        },
    }),
    "desenvolupament": _object({
        "estrategies_metodologiques": _string(),
        "activitats": _object({
            "inicials": _activity(),
            "desenvolupament": _activity(),
            "estructuracio": _activity(),
            "aplicacio": _activity(),
        }),
    }),
    "vectors_suports": _object(
        {
            "vectors_descripcio": _string(),
            "suports_universals": _string(),
            "suports_addicionals": {
                "type": "array",
                "items": _object({"alumne": _string(), "mesura": _string()}),
            },
        },
        required=["vectors_descripcio", "suports_universals"],
    ),
})
