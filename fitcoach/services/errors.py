# fitcoach/services/errors.py
"""Errores de dominio. Los blueprints los traducen a códigos HTTP."""


class FitcoachError(Exception):
    """Base de errores de la capa de servicios."""


class ValidationFailed(FitcoachError):
    def __init__(self, message, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = fields or {}


class PlanNotFound(FitcoachError):
    pass


class ReferenceNotFound(FitcoachError):
    """No hay plantilla/reglas de referencia para el ejercicio."""


class UnknownProvider(FitcoachError):
    pass


class IntegrationNotFound(FitcoachError):
    pass


class OnboardingAlreadyCompleted(FitcoachError):
    pass
