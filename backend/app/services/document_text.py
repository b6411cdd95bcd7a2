"""Fixed wording of the official model, shared by every renderer."""

INSTITUTION_LINES = ("Generalitat de Catalunya", "Departament d'Educació")
DOCUMENT_TITLE = "Situació d’aprenentatge"
TOTAL_PAGES = 5

# ── Cover ──
LABEL_TITLE = "Títol"
LABEL_LEVEL = "Curs (Nivell educatiu)"
LABEL_SUBJECT_AREA = "Àrea / Matèria / Àmbit"
COVER_FOOTNOTES = (
    "1 Són els escenaris que l’alumnat es troba a la vida real i que li "
    "permeten desenvolupar les competències.",
    "2 A l’educació primària fem referència a les àrees i a la secundària, "
    "a les matèries.",
    "3 Agrupació d’àrees o matèries.",
)

# ── Description and competencies ──
SECTION_DESCRIPTION = "DESCRIPCIÓ (Context + Repte)"
HINT_DESCRIPTION = (
    "Per què aquesta situació d’aprenentatge? Està relacionada amb alguna "
    "altra? Quin és el context? Quin repte planteja?"
)
SECTION_COMPETENCIES = "COMPETÈNCIES ESPECÍFIQUES"
INTRO_COMPETENCIES = (
    "Amb la realització d’aquesta situació d’aprenentatge s’afavoreix "
    "l’assoliment de les competències específiques següents:"
)
HEADER_COMPETENCY = "Competències específiques"
HEADER_SUBJECT = "Àrea o matèria"
SECTION_TRANSVERSAL = "TRACTAMENT DE LES COMPETÈNCIES TRANSVERSALS"

# ── Objectives, criteria and knowledge ──
SECTION_OBJECTIVES = "OBJECTIUS D'APRENENTATGE"
HINT_OBJECTIVES = "Què volem que aprengui l’alumnat i per a què? CAPACITAT + SABER + FINALITAT"
SECTION_CRITERIA = "CRITERIS D'AVALUACIÓ"
HINT_CRITERIA = "Com sabem que ho han après? ACCIÓ + SABER + CONTEXT"
SECTION_KNOWLEDGE = "SABERS"
INTRO_KNOWLEDGE = (
    "Amb la realització d’aquesta situació d’aprenentatge es tractaran els "
    "sabers següents:"
)
HEADER_NUMBER = "#"
HEADER_KNOWLEDGE = "Saber"

# ── Development ──
SECTION_DEVELOPMENT = "DESENVOLUPAMENT DE LA SITUACIÓ D’APRENENTATGE"
HINT_DEVELOPMENT = (
    "Quines són les principals estratègies metodològiques? Quins tipus "
    "d’agrupament? Materials i recursos?"
)
SECTION_ACTIVITIES = "ACTIVITATS D’APRENENTATGE I D’AVALUACIÓ"
HEADER_PHASE = "Fase"
HEADER_ACTIVITY = "Descripció de l’activitat d’aprenentatge i d’avaluació"
HEADER_TIME = "Temporització"

# (label, guiding hint) per phase, in display order
PHASE_TEXT = {
    "initial": ("Activitats inicials", "Què en sabem?"),
    "development": ("Activitats de desenvolupament", "Aprenem nous sabers"),
    "structuring": ("Activitats d’estructuració", "Què hem après?"),
    "application": ("Activitats d’aplicació", "Apliquem el que hem après"),
}

# ── Vectors and supports ──
SECTION_VECTORS = "BREU DESCRIPCIÓ DE COM S’ABORDEN ELS VECTORS"
SECTION_UNIVERSAL = "MESURES I SUPORTS UNIVERSALS"
SECTION_ADDITIONAL = "MESURES I SUPORTS ADDICIONALS O INTENSIUS"
INTRO_ADDITIONAL = (
    "Quines mesures o suports addicionals o intensius es proposen per a "
    "cadascun dels alumnes següents:"
)
HEADER_STUDENT = "Alumne"
HEADER_MEASURE = "Mesura i suport addicional o intensiu"
NO_DATA_LABEL = "No s'han definit dades"


def page_footer(number: int) -> str:
    return f"Pàgina {number}/{TOTAL_PAGES}"
