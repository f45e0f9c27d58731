"""
Export Column Configuration

Row schemas for the exported tables and their declarative column lists.
Column keys are checked against the row schema when a set is declared.
"""

from dataclasses import dataclass, fields
from typing import Any, Generic, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar

EXPORT_FORMATS = ("date", "datetime", "currency", "percent")

T = TypeVar("T")


@dataclass(frozen=True)
class ExportColumn:
    """One output column: header text, row field and optional cell format."""
    header: str
    key: str
    format: Optional[str] = None

    def __post_init__(self):
        if self.format is not None and self.format not in EXPORT_FORMATS:
            raise ValueError(f"Unknown export format '{self.format}' for column '{self.header}'")


class ExportColumnSet(Generic[T]):
    """
    Ordered columns bound to a row dataclass.

    Raises ValueError at declaration time if a column names a field the
    row schema does not have.
    """

    def __init__(self, row_type: Type[T], columns: Iterable[ExportColumn]):
        self.row_type = row_type
        self.columns: Tuple[ExportColumn, ...] = tuple(columns)

        field_names = {f.name for f in fields(row_type)}
        unknown = [col.key for col in self.columns if col.key not in field_names]
        if unknown:
            raise ValueError(f"{row_type.__name__} has no field(s): {', '.join(unknown)}")

    def __iter__(self) -> Iterator[ExportColumn]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def headers(self) -> List[str]:
        return [col.header for col in self.columns]

    def rows(self, records: Iterable[Mapping[str, Any]]) -> List[T]:
        """Convert backend row dicts to the bound row type."""
        return [self.row_type.from_record(record) for record in records or []]


class _RecordRow:
    """Builds a row dataclass from a backend dict, ignoring extra keys."""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]):
        return cls(**{f.name: record.get(f.name) for f in fields(cls)})


@dataclass(frozen=True)
class LeadExportRow(_RecordRow):
    nom: Any = None
    prenom: Any = None
    email: Any = None
    telephone: Any = None
    ville: Any = None
    code_postal: Any = None
    adresse: Any = None
    type_projet: Any = None
    surface: Any = None
    budget_estime: Any = None
    statut: Any = None
    source: Any = None
    score_qualification: Any = None
    delai: Any = None
    description: Any = None
    created_at: Any = None


@dataclass(frozen=True)
class DevisExportRow(_RecordRow):
    numero: Any = None
    client_nom: Any = None
    client_email: Any = None
    client_telephone: Any = None
    client_adresse: Any = None
    montant_ht: Any = None
    tva_pct: Any = None
    montant_ttc: Any = None
    statut: Any = None
    date_creation: Any = None
    date_validite: Any = None
    date_signature: Any = None
    notes: Any = None


@dataclass(frozen=True)
class ChantierExportRow(_RecordRow):
    nom_client: Any = None
    type_projet: Any = None
    adresse: Any = None
    statut: Any = None
    avancement_pct: Any = None
    date_debut: Any = None
    date_fin_prevue: Any = None
    date_fin_reelle: Any = None
    notes: Any = None
    created_at: Any = None


LEADS_EXPORT_COLUMNS = ExportColumnSet(LeadExportRow, [
    ExportColumn('Nom', 'nom'),
    ExportColumn('Prénom', 'prenom'),
    ExportColumn('Email', 'email'),
    ExportColumn('Téléphone', 'telephone'),
    ExportColumn('Ville', 'ville'),
    ExportColumn('Code postal', 'code_postal'),
    ExportColumn('Adresse', 'adresse'),
    ExportColumn('Type de projet', 'type_projet'),
    ExportColumn('Surface (m²)', 'surface'),
    ExportColumn('Budget estimé', 'budget_estime', 'currency'),
    ExportColumn('Statut', 'statut'),
    ExportColumn('Source', 'source'),
    ExportColumn('Score qualification', 'score_qualification'),
    ExportColumn('Délai', 'delai'),
    ExportColumn('Description', 'description'),
    ExportColumn('Date création', 'created_at', 'datetime'),
])

DEVIS_EXPORT_COLUMNS = ExportColumnSet(DevisExportRow, [
    ExportColumn('Numéro', 'numero'),
    ExportColumn('Client', 'client_nom'),
    ExportColumn('Email client', 'client_email'),
    ExportColumn('Téléphone', 'client_telephone'),
    ExportColumn('Adresse', 'client_adresse'),
    ExportColumn('Montant HT', 'montant_ht', 'currency'),
    ExportColumn('TVA (%)', 'tva_pct', 'percent'),
    ExportColumn('Montant TTC', 'montant_ttc', 'currency'),
    ExportColumn('Statut', 'statut'),
    ExportColumn('Date création', 'date_creation', 'date'),
    ExportColumn('Date validité', 'date_validite', 'date'),
    ExportColumn('Date signature', 'date_signature', 'date'),
    ExportColumn('Notes', 'notes'),
])

CHANTIERS_EXPORT_COLUMNS = ExportColumnSet(ChantierExportRow, [
    ExportColumn('Client', 'nom_client'),
    ExportColumn('Type de projet', 'type_projet'),
    ExportColumn('Adresse', 'adresse'),
    ExportColumn('Statut', 'statut'),
    ExportColumn('Avancement', 'avancement_pct', 'percent'),
    ExportColumn('Date début', 'date_debut', 'date'),
    ExportColumn('Date fin prévue', 'date_fin_prevue', 'date'),
    ExportColumn('Date fin réelle', 'date_fin_reelle', 'date'),
    ExportColumn('Notes', 'notes'),
    ExportColumn('Date création', 'created_at', 'datetime'),
])

# table name -> (column set, filename base)
EXPORT_CONFIGS = {
    "leads": (LEADS_EXPORT_COLUMNS, "leads"),
    "devis": (DEVIS_EXPORT_COLUMNS, "devis"),
    "chantiers": (CHANTIERS_EXPORT_COLUMNS, "chantiers"),
}
