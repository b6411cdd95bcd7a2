"""Shared sample documents for the Situació d'Aprenentatge tests."""

import copy
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ.setdefault("GEMINI_API_KEY", "fake-gemini-key-for-tests")
os.environ.setdefault("ENABLE_TELEMETRY_LOG", "false")

import pytest

from app.models.situacio import CurriculumUnit


SAMPLE_DOCUMENT = {
    "identificacio": {
        "titol": "Unitat: Egipte 5è!",
        "curs": "5è de Primària",
        "area_materia_ambit": "Coneixement del medi social",
    },
    "descripcio": {
        "context_repte": "L'escola prepara una exposició sobre l'antic Egipte.\nCal explicar-la a les famílies.",
        "competencies_transversals": "Competència digital i ciutadana",
    },
    "concrecio_curricular": {
        "competencies_especifiques": [
            {"descripcio": "CE.7. Analitzar fonts històriques", "area_materia": "Medi social"},
            {"descripcio": "Comunicar oralment el que s'ha après", "area_materia": "Llengua catalana"},
        ],
        "objectius": [
            "Identificar les funcions del Nil per entendre l'agricultura egípcia",
            "Explicar la construcció de les piràmides per valorar-ne la tècnica",
        ],
        "criteris_avaluacio": [
            "Identifica les funcions del Nil a partir d'un mapa",
            "2.1 Explica oralment la construcció de les piràmides",
        ],
        "sabers": [
            {"saber": "El riu Nil i l'agricultura", "area_materia": "Medi social"},
            {"saber": "L'exposició oral", "area_materia": "Llengua catalana"},
        ],
    },
    "desenvolupament": {
        "estrategies_metodologiques": "Treball cooperatiu per grups i aprenentatge basat en projectes",
        "activitats": {
            "inicials": {"descripcio": "Pluja d'idees sobre Egipte", "temporitzacio": "1 sessió"},
            "desenvolupament": {"descripcio": "Recerca en grups", "temporitzacio": "4 sessions"},
            "estructuracio": {"descripcio": "Mapa conceptual col·lectiu", "temporitzacio": "1 sessió"},
            "aplicacio": {"descripcio": "Exposició a les famílies", "temporitzacio": "2 sessions"},
        },
    },
    "vectors_suports": {
        "vectors_descripcio": "Perspectiva de gènere i universalitat del currículum",
        "suports_universals": "Materials visuals i agrupaments heterogenis",
        "suports_addicionals": [],
    },
}


@pytest.fixture
def document_data():
    """A fresh, mutable copy of the sample document in wire format."""
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def sample_unit(document_data):
    return CurriculumUnit.model_validate(document_data)


@pytest.fixture
def unit_with_supports(document_data):
    document_data["vectors_suports"]["suports_addicionals"] = [
        {"alumne": "Alumne A", "mesura": "Lectura en veu alta del material"},
        {"alumne": "Alumne B", "mesura": "Temps addicional a l'exposició"},
    ]
    return CurriculumUnit.model_validate(document_data)
