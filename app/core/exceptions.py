"""
Erreurs du réconciliateur de déploiements.

- ValidationError: entrée invalide ou enregistrement introuvable, aucun appel distant
- NamespaceProvisionError: la recherche puis la création du namespace ont échoué
- PublishError: upload ou suppression de script rejeté par la plateforme
- LedgerError: lecture/écriture du ledger local en échec

Les opérations publiques du réconciliateur attrapent ces erreurs à leur
frontière et les convertissent en {"success": False, "error": message}.
"""

UNKNOWN_ERROR = "Unknown error"


class ReconcilerError(Exception):
    """Base des erreurs du réconciliateur"""
    pass


class ValidationError(ReconcilerError):
    """Entrée invalide, rejetée avant tout effet distant"""
    pass


class DeploymentNotFoundError(ValidationError):
    """Aucun enregistrement pour cet identifiant"""

    def __init__(self, deployment_id: str):
        self.deployment_id = deployment_id
        super().__init__("Deployment not found")


class NamespaceProvisionError(ReconcilerError):
    """Le namespace n'existe pas et n'a pas pu être créé"""

    def __init__(self, namespace: str, message: str):
        self.namespace = namespace
        super().__init__(message)


class PublishError(ReconcilerError):
    """La plateforme a rejeté l'upload ou la suppression d'un script"""

    def __init__(self, worker_name: str, message: str):
        self.worker_name = worker_name
        super().__init__(message)


class LedgerError(ReconcilerError):
    """Échec du stockage local"""
    pass


def error_message(error: BaseException) -> str:
    """Message lisible d'une erreur, ou la sentinelle 'Unknown error'"""
    message = str(error) if error is not None else ""
    return message or UNKNOWN_ERROR
