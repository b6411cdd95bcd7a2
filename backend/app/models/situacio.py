"""Document model for a Situació d'Aprenentatge.

Python attributes are English; the wire format keeps the Catalan keys the
extraction schema uses, through aliases. Instances are frozen: a document is
only ever replaced as a whole.
"""
from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Identification(_Frozen):
    title: str = Field(alias="titol")
    level: str = Field(alias="curs")
    subject_area: str = Field(alias="area_materia_ambit")


class Description(_Frozen):
    context_and_challenge: str = Field(alias="context_repte")
    transversal_competencies: str = Field(alias="competencies_transversals")


class SpecificCompetency(_Frozen):
    description: str = Field(alias="descripcio")
    subject_area: str = Field(default="", alias="area_materia")


class KnowledgeItem(_Frozen):
    content: str = Field(alias="saber")
    subject_area: str = Field(default="", alias="area_materia")


class CurricularSpecification(_Frozen):
    specific_competencies: list[SpecificCompetency] = Field(
        default_factory=list, alias="competencies_especifiques"
    )
    objectives: list[str] = Field(default_factory=list, alias="objectius")
    evaluation_criteria: list[str] = Field(
        default_factory=list, alias="criteris_avaluacio"
    )
    knowledge_items: list[KnowledgeItem] = Field(default_factory=list, alias="sabers")


class ActivityDetail(_Frozen):
    description: str = Field(alias="descripcio")
    time_allocation: str = Field(alias="temporitzacio")


class Activities(_Frozen):
    """The four learning phases. Closed record: every phase is required."""
    initial: ActivityDetail = Field(alias="inicials")
    development: ActivityDetail = Field(alias="desenvolupament")
    structuring: ActivityDetail = Field(alias="estructuracio")
    application: ActivityDetail = Field(alias="aplicacio")


class Development(_Frozen):
    methodological_strategies: str = Field(alias="estrategies_metodologiques")
    activities: Activities = Field(alias="activitats")


class AdditionalSupport(_Frozen):
    student_label: str = Field(alias="alumne")
    measure: str = Field(alias="mesura")


class SupportMeasures(_Frozen):
    vectors_description: str = Field(alias="vectors_descripcio")
    universal_supports: str = Field(alias="suports_universals")
    additional_supports: list[AdditionalSupport] = Field(
        default_factory=list, alias="suports_addicionals"
    )


class CurriculumUnit(_Frozen):
    identification: Identification = Field(alias="identificacio")
    description: Description = Field(alias="descripcio")
    curricular_specification: CurricularSpecification = Field(
        alias="concrecio_curricular"
    )
    development: Development = Field(alias="desenvolupament")
    support_measures: SupportMeasures = Field(alias="vectors_suports")


class ExtractionRequest(BaseModel):
    text: str


class IngestionResponse(BaseModel):
    filename: str
    text: str
