class RefundSplitError(RuntimeError):
    """Erreur de base du découpage par LO."""


class InputError(RefundSplitError):
    """Document source illisible ou mal formé."""


class ExtractionError(InputError):
    """Échec de l'extraction du texte du PDF source."""


class NoRecordsError(RefundSplitError):
    """Aucune ligne LO exploitable trouvée (en-tête absent ou tableau vide)."""


class CompositionError(RefundSplitError):
    """Échec de la construction d'un PDF de sortie (page synthétisée ou copie de pages)."""


class ArchiveError(RefundSplitError):
    """Échec de l'écriture de l'archive ZIP."""
